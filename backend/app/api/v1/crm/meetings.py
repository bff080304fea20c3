"""
Meeting endpoints for CRM module.

Meetings record whether an organization or a team member wrote them
(``created_by_kind`` / ``updated_by_kind``).
Permissions: meeting.read / meeting.create / meeting.update / meeting.delete
"""
from typing import Optional
from datetime import datetime, timezone
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
from app.models.meeting import Meeting, MeetingStatus
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import MeetingCreate, MeetingUpdate, MeetingResponse

router = APIRouter()


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _check_window(starts_at: datetime, ends_at: datetime) -> None:
    starts_at, ends_at = _aware(starts_at), _aware(ends_at)
    if ends_at < starts_at:
        raise InvalidFormat("Meeting end time must be after start time")


@router.get("", response_model=Envelope[PaginatedResponse[MeetingResponse]])
async def list_meetings(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    meeting_status: Optional[MeetingStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("meeting.read")),
):
    query = scoped(select(Meeting), Meeting, ctx.tenant_scope).where(Meeting.status == status)
    if meeting_status:
        query = query.where(Meeting.meeting_status == meeting_status)

    page_data = await paginate(db, query, Meeting.starts_at.desc(), page, perPage)
    page_data["items"] = [MeetingResponse.model_validate(m) for m in page_data["items"]]
    return ok(page_data, "Meetings fetched successfully")


@router.post("", response_model=Envelope[MeetingResponse], status_code=status.HTTP_201_CREATED)
async def create_meeting(
    meeting_data: MeetingCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("meeting.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    _check_window(meeting_data.starts_at, meeting_data.ends_at)

    meeting = Meeting(organization_id=tenant_scope, **meeting_data.model_dump())
    stamp_create(meeting, ctx)
    db.add(meeting)
    await db.flush()
    await db.refresh(meeting)
    return ok(MeetingResponse.model_validate(meeting), "Meeting created successfully")


@router.get("/{meeting_id}", response_model=Envelope[MeetingResponse])
async def get_meeting(
    meeting_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("meeting.read")),
):
    meeting = await get_scoped_or_404(db, Meeting, meeting_id, ctx.tenant_scope, "Meeting")
    return ok(MeetingResponse.model_validate(meeting))


@router.put("/{meeting_id}", response_model=Envelope[MeetingResponse])
async def update_meeting(
    meeting_id: str,
    meeting_data: MeetingUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("meeting.update")),
):
    tenant_scope = ctx.require_tenant()
    meeting = await get_scoped_or_404(db, Meeting, meeting_id, tenant_scope, "Meeting")
    changes = meeting_data.model_dump(exclude_unset=True, exclude_none=True)
    if "starts_at" in changes or "ends_at" in changes:
        _check_window(
            changes.get("starts_at", meeting.starts_at),
            changes.get("ends_at", meeting.ends_at),
        )

    apply_updates(meeting, changes)
    stamp_update(meeting, ctx)
    await db.flush()
    await db.refresh(meeting)
    return ok(MeetingResponse.model_validate(meeting), "Meeting updated successfully")


@router.put("/{meeting_id}/status", response_model=Envelope[MeetingResponse])
async def update_meeting_status(
    meeting_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("meeting.delete")),
):
    tenant_scope = ctx.require_tenant()
    meeting = await get_scoped_or_404(db, Meeting, meeting_id, tenant_scope, "Meeting")
    meeting.status = status_data.status
    stamp_update(meeting, ctx)
    await db.flush()
    await db.refresh(meeting)
    return ok(MeetingResponse.model_validate(meeting), "Meeting status updated successfully")
