"""
Product category endpoints for CRM module.

Permissions: category.read / category.create / category.update / category.delete
"""
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import AccessContext, require_permission
from app.core.tenancy import (
    scoped, get_scoped_or_404, stamp_create, stamp_update, apply_updates, paginate,
)
from app.models.base import RecordStatus
from app.models.product import Category
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import CategoryCreate, CategoryUpdate, CategoryResponse

router = APIRouter()


@router.get("", response_model=Envelope[PaginatedResponse[CategoryResponse]])
async def list_categories(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("category.read")),
):
    query = scoped(select(Category), Category, ctx.tenant_scope).where(Category.status == status)
    page_data = await paginate(db, query, Category.name, page, perPage)
    page_data["items"] = [CategoryResponse.model_validate(c) for c in page_data["items"]]
    return ok(page_data, "Categories fetched successfully")


@router.post("", response_model=Envelope[CategoryResponse], status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("category.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    category = Category(organization_id=tenant_scope, **category_data.model_dump())
    stamp_create(category, ctx)
    db.add(category)
    await db.flush()
    await db.refresh(category)
    return ok(CategoryResponse.model_validate(category), "Category created successfully")


@router.get("/{category_id}", response_model=Envelope[CategoryResponse])
async def get_category(
    category_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("category.read")),
):
    category = await get_scoped_or_404(db, Category, category_id, ctx.tenant_scope, "Category")
    return ok(CategoryResponse.model_validate(category))


@router.put("/{category_id}", response_model=Envelope[CategoryResponse])
async def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("category.update")),
):
    tenant_scope = ctx.require_tenant()
    category = await get_scoped_or_404(db, Category, category_id, tenant_scope, "Category")
    apply_updates(category, category_data.model_dump(exclude_unset=True, exclude_none=True))
    stamp_update(category, ctx)
    await db.flush()
    await db.refresh(category)
    return ok(CategoryResponse.model_validate(category), "Category updated successfully")


@router.put("/{category_id}/status", response_model=Envelope[CategoryResponse])
async def update_category_status(
    category_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("category.delete")),
):
    tenant_scope = ctx.require_tenant()
    category = await get_scoped_or_404(db, Category, category_id, tenant_scope, "Category")
    category.status = status_data.status
    stamp_update(category, ctx)
    await db.flush()
    await db.refresh(category)
    return ok(CategoryResponse.model_validate(category), "Category status updated successfully")
