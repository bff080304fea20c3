"""
Super-admin endpoints.

Super-admins are provisioned out of band (see ``scripts/create_super_admin.py``);
there is no signup route.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.core.deps import require_super_admin
from app.core.exceptions import Unauthorized
from app.core.identity import Principal
from app.core.security import ROLE_SUPERADMIN, create_access_token, verify_password
from app.models.base import RecordStatus
from app.models.super_admin import SuperAdmin
from app.schemas.auth import LoginRequest, TokenData, SuperAdminResponse
from app.schemas.common import Envelope, ok

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=Envelope[TokenData])
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(SuperAdmin).where(SuperAdmin.email == credentials.email))
    super_admin = result.scalar_one_or_none()

    if super_admin is None or not verify_password(credentials.password, super_admin.password_hash):
        raise Unauthorized("Invalid email or password")
    if super_admin.status != RecordStatus.ACTIVE:
        logger.warning("Login attempt for inactive super admin %s", super_admin.id)
        raise Unauthorized("Account is inactive")

    token = create_access_token(subject=super_admin.id, role=ROLE_SUPERADMIN)
    return ok(TokenData(token=token, role=ROLE_SUPERADMIN, id=super_admin.id), "Login successful")


@router.get("/me", response_model=Envelope[SuperAdminResponse])
async def get_me(
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    super_admin = await db.get(SuperAdmin, principal.id)
    return ok(SuperAdminResponse.model_validate(super_admin))
