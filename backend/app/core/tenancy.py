"""Tenant-scoped query helpers shared by every CRM resource router.

Every read and write goes through ``scoped``/``get_scoped_or_404`` so a
record belonging to another organization is indistinguishable from a
missing one (404).
"""
from math import ceil
from typing import Any, Optional, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import AccessContext
from app.core.exceptions import NotFound

ModelT = TypeVar("ModelT")


def scoped(query: Select, model: Type[Any], tenant_scope: Optional[str]) -> Select:
    """Add the mandatory ``organization_id`` filter. No scope means super-admin."""
    if tenant_scope is None:
        return query
    return query.where(model.organization_id == tenant_scope)


async def get_scoped_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    record_id: str,
    tenant_scope: Optional[str],
    label: Optional[str] = None,
) -> ModelT:
    query = scoped(select(model).where(model.id == record_id), model, tenant_scope)
    record = (await db.execute(query)).scalar_one_or_none()
    if record is None:
        raise NotFound(f"{label or model.__name__} not found")
    return record


async def ensure_in_tenant(
    db: AsyncSession,
    tenant_scope: Optional[str],
    references: dict[Type[Any], Optional[str]],
) -> None:
    """Every referenced id in a payload must resolve inside the same tenant."""
    for model, record_id in references.items():
        if record_id:
            await get_scoped_or_404(db, model, record_id, tenant_scope)


def stamp_create(record: Any, ctx: AccessContext) -> None:
    record.created_by = ctx.actor_id
    record.updated_by = ctx.actor_id
    if hasattr(record, "created_by_kind"):
        record.created_by_kind = ctx.principal.actor_kind
        record.updated_by_kind = ctx.principal.actor_kind


def stamp_update(record: Any, ctx: AccessContext) -> None:
    record.updated_by = ctx.actor_id
    if hasattr(record, "updated_by_kind"):
        record.updated_by_kind = ctx.principal.actor_kind


def apply_updates(record: Any, changes: dict[str, Any]) -> None:
    for field, value in changes.items():
        setattr(record, field, value)


async def paginate(
    db: AsyncSession,
    query: Select,
    order_by: Any,
    page: int,
    per_page: int,
) -> dict[str, Any]:
    """Run ``query`` for one page, returning the PaginatedResponse fields."""
    count_query = select(func.count()).select_from(query.subquery())
    total_items = (await db.execute(count_query)).scalar() or 0

    query = query.order_by(order_by).offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(query)
    return {
        "page": page,
        "perPage": per_page,
        "totalItems": total_items,
        "totalPages": ceil(total_items / per_page) if total_items > 0 else 1,
        "items": list(result.scalars().all()),
    }
