"""
Product endpoints for CRM module.

Permissions: product.read / product.create / product.update / product.delete
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
from app.models.product import Category, Product
from app.models.team_member import TeamMember
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import ProductCreate, ProductUpdate, ProductResponse

router = APIRouter()


@router.get("", response_model=Envelope[PaginatedResponse[ProductResponse]])
async def list_products(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    category_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Search name/code"),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("product.read")),
):
    query = scoped(select(Product), Product, ctx.tenant_scope).where(Product.status == status)
    if category_id:
        query = query.where(Product.category_id == category_id)
    if search:
        query = query.where(
            Product.name.ilike(f"%{search}%") | Product.code.ilike(f"%{search}%")
        )

    page_data = await paginate(db, query, Product.created.desc(), page, perPage)
    page_data["items"] = [ProductResponse.model_validate(p) for p in page_data["items"]]
    return ok(page_data, "Products fetched successfully")


@router.post("", response_model=Envelope[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("product.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    await ensure_in_tenant(db, tenant_scope, {
        Category: product_data.category_id,
        TeamMember: product_data.owner_id,
    })

    product = Product(organization_id=tenant_scope, **product_data.model_dump())
    stamp_create(product, ctx)
    db.add(product)
    await db.flush()
    await db.refresh(product)
    return ok(ProductResponse.model_validate(product), "Product created successfully")


@router.get("/{product_id}", response_model=Envelope[ProductResponse])
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("product.read")),
):
    product = await get_scoped_or_404(db, Product, product_id, ctx.tenant_scope, "Product")
    return ok(ProductResponse.model_validate(product))


@router.put("/{product_id}", response_model=Envelope[ProductResponse])
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("product.update")),
):
    tenant_scope = ctx.require_tenant()
    product = await get_scoped_or_404(db, Product, product_id, tenant_scope, "Product")
    changes = product_data.model_dump(exclude_unset=True, exclude_none=True)
    await ensure_in_tenant(db, tenant_scope, {
        Category: changes.get("category_id"),
        TeamMember: changes.get("owner_id"),
    })

    apply_updates(product, changes)
    stamp_update(product, ctx)
    await db.flush()
    await db.refresh(product)
    return ok(ProductResponse.model_validate(product), "Product updated successfully")


@router.put("/{product_id}/status", response_model=Envelope[ProductResponse])
async def update_product_status(
    product_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("product.delete")),
):
    tenant_scope = ctx.require_tenant()
    product = await get_scoped_or_404(db, Product, product_id, tenant_scope, "Product")
    product.status = status_data.status
    stamp_update(product, ctx)
    await db.flush()
    await db.refresh(product)
    return ok(ProductResponse.model_validate(product), "Product status updated successfully")
