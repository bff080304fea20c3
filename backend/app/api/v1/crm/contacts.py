"""
Contact endpoints for CRM module.

Permissions: contact.read / contact.create / contact.update / contact.delete
"""
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import AccessContext, require_permission
from app.core.tenancy import (
    scoped, get_scoped_or_404, ensure_in_tenant, stamp_create, stamp_update,
    apply_updates, paginate,
)
from app.models.base import RecordStatus
from app.models.company import Company
from app.models.contact import Contact
from app.models.team_member import TeamMember
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import ContactCreate, ContactUpdate, ContactResponse

router = APIRouter()


@router.get("", response_model=Envelope[PaginatedResponse[ContactResponse]])
async def list_contacts(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    company_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search name/email"),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("contact.read")),
):
    query = scoped(select(Contact), Contact, ctx.tenant_scope).where(Contact.status == status)
    if company_id:
        query = query.where(Contact.company_id == company_id)
    if search:
        query = query.where(
            Contact.name.ilike(f"%{search}%") | Contact.email.ilike(f"%{search}%")
        )

    page_data = await paginate(db, query, Contact.created.desc(), page, perPage)
    page_data["items"] = [ContactResponse.model_validate(c) for c in page_data["items"]]
    return ok(page_data, "Contacts fetched successfully")


@router.post("", response_model=Envelope[ContactResponse], status_code=status.HTTP_201_CREATED)
async def create_contact(
    contact_data: ContactCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("contact.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    await ensure_in_tenant(db, tenant_scope, {
        Company: contact_data.company_id,
        TeamMember: contact_data.owner_id,
    })

    contact = Contact(organization_id=tenant_scope, **contact_data.model_dump())
    stamp_create(contact, ctx)
    db.add(contact)
    await db.flush()
    await db.refresh(contact)
    return ok(ContactResponse.model_validate(contact), "Contact created successfully")


@router.get("/{contact_id}", response_model=Envelope[ContactResponse])
async def get_contact(
    contact_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("contact.read")),
):
    contact = await get_scoped_or_404(db, Contact, contact_id, ctx.tenant_scope, "Contact")
    return ok(ContactResponse.model_validate(contact))


@router.put("/{contact_id}", response_model=Envelope[ContactResponse])
async def update_contact(
    contact_id: str,
    contact_data: ContactUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("contact.update")),
):
    tenant_scope = ctx.require_tenant()
    contact = await get_scoped_or_404(db, Contact, contact_id, tenant_scope, "Contact")
    changes = contact_data.model_dump(exclude_unset=True, exclude_none=True)
    await ensure_in_tenant(db, tenant_scope, {
        Company: changes.get("company_id"),
        TeamMember: changes.get("owner_id"),
    })

    apply_updates(contact, changes)
    stamp_update(contact, ctx)
    await db.flush()
    await db.refresh(contact)
    return ok(ContactResponse.model_validate(contact), "Contact updated successfully")


@router.put("/{contact_id}/status", response_model=Envelope[ContactResponse])
async def update_contact_status(
    contact_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("contact.delete")),
):
    tenant_scope = ctx.require_tenant()
    contact = await get_scoped_or_404(db, Contact, contact_id, tenant_scope, "Contact")
    contact.status = status_data.status
    stamp_update(contact, ctx)
    await db.flush()
    await db.refresh(contact)
    return ok(ContactResponse.model_validate(contact), "Contact status updated successfully")
