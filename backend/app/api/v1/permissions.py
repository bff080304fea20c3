"""
Permission catalog endpoints.

Super-admins define permissions; any authenticated principal can read the
catalog so organizations can pick what to assign.
"""
from typing import Union

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.core.deps import get_current_principal, require_super_admin
from app.core.identity import Principal
from app.schemas.common import Envelope, ok
from app.schemas.permission import PermissionCreate, PermissionUpdate, PermissionResponse
from app.services import permission_catalog

router = APIRouter()


@router.get("", response_model=Envelope[list[PermissionResponse]])
async def list_permissions(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    permissions = await permission_catalog.list_permissions(db)
    return ok([PermissionResponse.model_validate(p) for p in permissions], "Permissions fetched successfully")


@router.post(
    "",
    response_model=Envelope[Union[PermissionResponse, list[PermissionResponse]]],
    status_code=status.HTTP_201_CREATED,
)
async def create_permission(
    body: Union[PermissionCreate, list[PermissionCreate]],
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Define one permission, or a list of them in a single transaction."""
    if isinstance(body, list):
        permissions = await permission_catalog.define_many(
            db, [(item.name, item.description) for item in body]
        )
        return ok(
            [PermissionResponse.model_validate(p) for p in permissions],
            "Permissions created successfully",
        )

    permission = await permission_catalog.define(db, body.name, body.description)
    return ok(PermissionResponse.model_validate(permission), "Permission created successfully")


@router.get("/{permission_id}", response_model=Envelope[PermissionResponse])
async def get_permission(
    permission_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    permission = await permission_catalog.get_permission(db, permission_id)
    return ok(PermissionResponse.model_validate(permission))


@router.put("/{permission_id}", response_model=Envelope[PermissionResponse])
async def update_permission(
    permission_id: str,
    body: PermissionUpdate,
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    permission = await permission_catalog.update_permission(
        db, permission_id, name=body.name, description=body.description
    )
    await db.refresh(permission)
    return ok(PermissionResponse.model_validate(permission), "Permission updated successfully")


@router.delete("/{permission_id}", response_model=Envelope[None])
async def delete_permission(
    permission_id: str,
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Removing a permission also removes every assignment of it."""
    await permission_catalog.delete_permission(db, permission_id)
    return ok(None, "Permission deleted successfully")
