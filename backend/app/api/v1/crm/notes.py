"""
Note endpoints for CRM module.

A note is attached to one record of another CRM module, named by
``module`` + ``module_id``; that record must live in the caller's tenant.
Permissions: note.read / note.create / note.update / note.delete
"""
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import AccessContext, require_permission
from app.core.exceptions import InvalidFormat
from app.core.tenancy import (
    scoped, get_scoped_or_404, stamp_create, stamp_update, apply_updates, paginate,
)
from app.models.base import RecordStatus
from app.models.company import Company
from app.models.contact import Contact
from app.models.lead import Lead
from app.models.meeting import Meeting
from app.models.note import Note
from app.models.pipeline import Pipeline
from app.models.product import Product
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import NoteCreate, NoteUpdate, NoteResponse

router = APIRouter()

NOTE_TARGETS = {
    "lead": Lead,
    "company": Company,
    "contact": Contact,
    "product": Product,
    "pipeline": Pipeline,
    "meeting": Meeting,
}


@router.get("", response_model=Envelope[PaginatedResponse[NoteResponse]])
async def list_notes(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    module: Optional[str] = Query(None),
    module_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("note.read")),
):
    query = scoped(select(Note), Note, ctx.tenant_scope).where(Note.status == status)
    if module:
        query = query.where(Note.module == module)
    if module_id:
        query = query.where(Note.module_id == module_id)

    page_data = await paginate(db, query, Note.created.desc(), page, perPage)
    page_data["items"] = [NoteResponse.model_validate(n) for n in page_data["items"]]
    return ok(page_data, "Notes fetched successfully")


@router.post("", response_model=Envelope[NoteResponse], status_code=status.HTTP_201_CREATED)
async def create_note(
    note_data: NoteCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("note.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    target = NOTE_TARGETS.get(note_data.module)
    if target is None:
        raise InvalidFormat(f"Notes cannot be attached to module '{note_data.module}'")
    await get_scoped_or_404(db, target, note_data.module_id, tenant_scope)

    note = Note(organization_id=tenant_scope, **note_data.model_dump())
    stamp_create(note, ctx)
    db.add(note)
    await db.flush()
    await db.refresh(note)
    return ok(NoteResponse.model_validate(note), "Note created successfully")


@router.get("/{note_id}", response_model=Envelope[NoteResponse])
async def get_note(
    note_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("note.read")),
):
    note = await get_scoped_or_404(db, Note, note_id, ctx.tenant_scope, "Note")
    return ok(NoteResponse.model_validate(note))


@router.put("/{note_id}", response_model=Envelope[NoteResponse])
async def update_note(
    note_id: str,
    note_data: NoteUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("note.update")),
):
    tenant_scope = ctx.require_tenant()
    note = await get_scoped_or_404(db, Note, note_id, tenant_scope, "Note")
    apply_updates(note, note_data.model_dump(exclude_unset=True, exclude_none=True))
    stamp_update(note, ctx)
    await db.flush()
    await db.refresh(note)
    return ok(NoteResponse.model_validate(note), "Note updated successfully")


@router.put("/{note_id}/status", response_model=Envelope[NoteResponse])
async def update_note_status(
    note_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("note.delete")),
):
    tenant_scope = ctx.require_tenant()
    note = await get_scoped_or_404(db, Note, note_id, tenant_scope, "Note")
    note.status = status_data.status
    stamp_update(note, ctx)
    await db.flush()
    await db.refresh(note)
    return ok(NoteResponse.model_validate(note), "Note status updated successfully")
