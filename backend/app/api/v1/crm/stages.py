"""
Pipeline stage endpoints for CRM module.

Stages are ordered by ``serial_number`` within their pipeline.
Permissions: stage.read / stage.create / stage.update / stage.delete
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
from app.models.pipeline import Pipeline, Stage
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import StageCreate, StageUpdate, StageResponse

router = APIRouter()


@router.get("", response_model=Envelope[PaginatedResponse[StageResponse]])
async def list_stages(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    pipeline_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("stage.read")),
):
    query = scoped(select(Stage), Stage, ctx.tenant_scope).where(Stage.status == status)
    if pipeline_id:
        query = query.where(Stage.pipeline_id == pipeline_id)

    page_data = await paginate(db, query, Stage.serial_number, page, perPage)
    page_data["items"] = [StageResponse.model_validate(s) for s in page_data["items"]]
    return ok(page_data, "Stages fetched successfully")


@router.post("", response_model=Envelope[StageResponse], status_code=status.HTTP_201_CREATED)
async def create_stage(
    stage_data: StageCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("stage.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    await ensure_in_tenant(db, tenant_scope, {Pipeline: stage_data.pipeline_id})

    stage = Stage(organization_id=tenant_scope, **stage_data.model_dump())
    stamp_create(stage, ctx)
    db.add(stage)
    await db.flush()
    await db.refresh(stage)
    return ok(StageResponse.model_validate(stage), "Stage created successfully")


@router.get("/{stage_id}", response_model=Envelope[StageResponse])
async def get_stage(
    stage_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("stage.read")),
):
    stage = await get_scoped_or_404(db, Stage, stage_id, ctx.tenant_scope, "Stage")
    return ok(StageResponse.model_validate(stage))


@router.put("/{stage_id}", response_model=Envelope[StageResponse])
async def update_stage(
    stage_id: str,
    stage_data: StageUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("stage.update")),
):
    tenant_scope = ctx.require_tenant()
    stage = await get_scoped_or_404(db, Stage, stage_id, tenant_scope, "Stage")
    apply_updates(stage, stage_data.model_dump(exclude_unset=True, exclude_none=True))
    stamp_update(stage, ctx)
    await db.flush()
    await db.refresh(stage)
    return ok(StageResponse.model_validate(stage), "Stage updated successfully")


@router.put("/{stage_id}/status", response_model=Envelope[StageResponse])
async def update_stage_status(
    stage_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("stage.delete")),
):
    tenant_scope = ctx.require_tenant()
    stage = await get_scoped_or_404(db, Stage, stage_id, tenant_scope, "Stage")
    stage.status = status_data.status
    stamp_update(stage, ctx)
    await db.flush()
    await db.refresh(stage)
    return ok(StageResponse.model_validate(stage), "Stage status updated successfully")
