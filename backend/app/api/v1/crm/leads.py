"""
Lead endpoints for CRM module.

Permissions:
- List/Get: lead.read
- Create: lead.create
- Update: lead.update
- Status (soft delete / restore): lead.delete
"""
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import AccessContext, require_permission
from app.core.exceptions import InvalidFormat
from app.core.tenancy import (
    scoped, get_scoped_or_404, ensure_in_tenant, stamp_create, stamp_update,
    apply_updates, paginate,
)
from app.models.base import RecordStatus
from app.models.company import Company
from app.models.contact import Contact
from app.models.lead import Lead
from app.models.meeting import Meeting
from app.models.pipeline import Pipeline, Stage
from app.models.product import Product
from app.models.team_member import TeamMember
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import LeadCreate, LeadUpdate, LeadResponse

router = APIRouter()


async def _check_references(db: AsyncSession, tenant_scope: str, values: dict) -> None:
    await ensure_in_tenant(db, tenant_scope, {
        Pipeline: values.get("pipeline_id"),
        TeamMember: values.get("assigned_to"),
        Product: values.get("product_id"),
        Company: values.get("company_id"),
        Contact: values.get("contact_id"),
        Meeting: values.get("meeting_id"),
    })


async def _check_stage(db: AsyncSession, tenant_scope: str, stage_id: str, pipeline_id: str) -> None:
    stage = await get_scoped_or_404(db, Stage, stage_id, tenant_scope)
    if stage.pipeline_id != pipeline_id:
        raise InvalidFormat("Stage does not belong to the selected pipeline")


@router.get("", response_model=Envelope[PaginatedResponse[LeadResponse]])
async def list_leads(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1, description="0 = deleted, 1 = active"),
    pipeline_id: Optional[str] = Query(None),
    stage_id: Optional[str] = Query(None),
    assigned_to: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search by name"),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("lead.read")),
):
    """List the tenant's leads."""
    query = scoped(select(Lead), Lead, ctx.tenant_scope).where(Lead.status == status)

    if pipeline_id:
        query = query.where(Lead.pipeline_id == pipeline_id)
    if stage_id:
        query = query.where(Lead.stage_id == stage_id)
    if assigned_to:
        query = query.where(Lead.assigned_to == assigned_to)
    if search:
        query = query.where(Lead.name.ilike(f"%{search}%"))

    page_data = await paginate(db, query, Lead.created.desc(), page, perPage)
    page_data["items"] = [LeadResponse.model_validate(lead) for lead in page_data["items"]]
    return ok(page_data, "Leads fetched successfully")


@router.post("", response_model=Envelope[LeadResponse], status_code=status.HTTP_201_CREATED)
async def create_lead(
    lead_data: LeadCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("lead.create", check_plan=True)),
):
    """Create a lead in the caller's organization."""
    tenant_scope = ctx.require_tenant()
    values = lead_data.model_dump()
    await _check_references(db, tenant_scope, values)
    await _check_stage(db, tenant_scope, lead_data.stage_id, lead_data.pipeline_id)

    lead = Lead(organization_id=tenant_scope, **values)
    stamp_create(lead, ctx)
    db.add(lead)
    await db.flush()
    await db.refresh(lead)

    return ok(LeadResponse.model_validate(lead), "Lead created successfully")


@router.get("/{lead_id}", response_model=Envelope[LeadResponse])
async def get_lead(
    lead_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("lead.read")),
):
    lead = await get_scoped_or_404(db, Lead, lead_id, ctx.tenant_scope, "Lead")
    return ok(LeadResponse.model_validate(lead))


@router.put("/{lead_id}", response_model=Envelope[LeadResponse])
async def update_lead(
    lead_id: str,
    lead_data: LeadUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("lead.update")),
):
    tenant_scope = ctx.require_tenant()
    lead = await get_scoped_or_404(db, Lead, lead_id, tenant_scope, "Lead")

    changes = lead_data.model_dump(exclude_unset=True, exclude_none=True)
    await _check_references(db, tenant_scope, changes)
    if "stage_id" in changes or "pipeline_id" in changes:
        await _check_stage(
            db, tenant_scope,
            changes.get("stage_id", lead.stage_id),
            changes.get("pipeline_id", lead.pipeline_id),
        )

    apply_updates(lead, changes)
    stamp_update(lead, ctx)
    await db.flush()
    await db.refresh(lead)

    return ok(LeadResponse.model_validate(lead), "Lead updated successfully")


@router.put("/{lead_id}/status", response_model=Envelope[LeadResponse])
async def update_lead_status(
    lead_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("lead.delete")),
):
    """Soft delete (0) or restore (1) a lead."""
    tenant_scope = ctx.require_tenant()
    lead = await get_scoped_or_404(db, Lead, lead_id, tenant_scope, "Lead")
    lead.status = RecordStatus(status_data.status)
    stamp_update(lead, ctx)
    await db.flush()
    await db.refresh(lead)

    return ok(LeadResponse.model_validate(lead), "Lead status updated successfully")
