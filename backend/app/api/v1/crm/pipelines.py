"""
Sales pipeline endpoints for CRM module.

Permissions: pipeline.read / pipeline.create / pipeline.update / pipeline.delete
"""
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import AccessContext, require_permission
from app.core.tenancy import (
    scoped, get_scoped_or_404, stamp_create, stamp_update, apply_updates, paginate,
)
from app.models.base import RecordStatus
from app.models.pipeline import Pipeline
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import PipelineCreate, PipelineUpdate, PipelineResponse

router = APIRouter()


@router.get("", response_model=Envelope[PaginatedResponse[PipelineResponse]])
async def list_pipelines(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("pipeline.read")),
):
    query = scoped(select(Pipeline), Pipeline, ctx.tenant_scope).where(Pipeline.status == status)
    if search:
        query = query.where(Pipeline.name.ilike(f"%{search}%"))

    page_data = await paginate(db, query, Pipeline.created.desc(), page, perPage)
    page_data["items"] = [PipelineResponse.model_validate(p) for p in page_data["items"]]
    return ok(page_data, "Pipelines fetched successfully")


@router.post("", response_model=Envelope[PipelineResponse], status_code=status.HTTP_201_CREATED)
async def create_pipeline(
    pipeline_data: PipelineCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("pipeline.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    pipeline = Pipeline(organization_id=tenant_scope, **pipeline_data.model_dump())
    stamp_create(pipeline, ctx)
    db.add(pipeline)
    await db.flush()
    await db.refresh(pipeline)
    return ok(PipelineResponse.model_validate(pipeline), "Pipeline created successfully")


@router.get("/{pipeline_id}", response_model=Envelope[PipelineResponse])
async def get_pipeline(
    pipeline_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("pipeline.read")),
):
    pipeline = await get_scoped_or_404(db, Pipeline, pipeline_id, ctx.tenant_scope, "Pipeline")
    return ok(PipelineResponse.model_validate(pipeline))


@router.put("/{pipeline_id}", response_model=Envelope[PipelineResponse])
async def update_pipeline(
    pipeline_id: str,
    pipeline_data: PipelineUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("pipeline.update")),
):
    tenant_scope = ctx.require_tenant()
    pipeline = await get_scoped_or_404(db, Pipeline, pipeline_id, tenant_scope, "Pipeline")
    apply_updates(pipeline, pipeline_data.model_dump(exclude_unset=True, exclude_none=True))
    stamp_update(pipeline, ctx)
    await db.flush()
    await db.refresh(pipeline)
    return ok(PipelineResponse.model_validate(pipeline), "Pipeline updated successfully")


@router.put("/{pipeline_id}/status", response_model=Envelope[PipelineResponse])
async def update_pipeline_status(
    pipeline_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("pipeline.delete")),
):
    tenant_scope = ctx.require_tenant()
    pipeline = await get_scoped_or_404(db, Pipeline, pipeline_id, tenant_scope, "Pipeline")
    pipeline.status = status_data.status
    stamp_update(pipeline, ctx)
    await db.flush()
    await db.refresh(pipeline)
    return ok(PipelineResponse.model_validate(pipeline), "Pipeline status updated successfully")
