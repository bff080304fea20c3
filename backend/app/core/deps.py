"""
FastAPI dependencies wiring the authorization pipeline into routes:
bearer header -> claims -> principal -> permission decision -> tenant scope.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import security
from app.core.authorization import authorize
from app.core.config import settings
from app.core.exceptions import Forbidden, PlanExpired, Unauthorized
from app.core.identity import Principal, resolve
from app.core.security import Claims
from app.db.base import get_db
from app.models.organization import Organization


@dataclass(frozen=True)
class AccessContext:
    """What a route handler gets back from ``require_permission``."""
    principal: Principal
    tenant_scope: Optional[str]

    @property
    def actor_id(self) -> str:
        return self.principal.id

    def require_tenant(self) -> str:
        """Tenant scope for writes; super-admins have none and cannot write tenant data."""
        if self.tenant_scope is None:
            raise Forbidden("An organization scope is required for this operation")
        return self.tenant_scope


async def get_claims(authorization: Optional[str] = Header(None)) -> Claims:
    token = security.extract_bearer(authorization)
    return security.verify(token)


async def get_current_principal(
    claims: Claims = Depends(get_claims),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    return await resolve(db, claims)


async def require_organization(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not principal.is_organization:
        raise Forbidden("Access denied. Organizations only.")
    return principal


async def require_team_member(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not principal.is_team_member:
        raise Forbidden("Access denied. Team members only.")
    return principal


async def require_super_admin(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not principal.is_super_admin:
        raise Forbidden("Access denied. Super admins only.")
    return principal


async def require_tenant_member(
    principal: Principal = Depends(get_current_principal),
) -> AccessContext:
    """Organization or team member acting inside its tenant, no permission needed."""
    if principal.tenant_scope is None:
        raise Forbidden("Access denied. Organization or team member only.")
    return AccessContext(principal=principal, tenant_scope=principal.tenant_scope)


async def ensure_plan_valid(db: AsyncSession, organization_id: str) -> None:
    organization = await db.get(Organization, organization_id)
    if organization is None:
        raise Unauthorized()
    if organization.plan_expire_date is None:
        raise PlanExpired("No active plan found!")
    if not organization.has_valid_plan():
        raise PlanExpired()


def require_permission(permission_name: str, check_plan: bool = False):
    """Dependency factory: ``Depends(require_permission("lead.create"))``."""

    async def dependency(
        principal: Principal = Depends(get_current_principal),
        db: AsyncSession = Depends(get_db),
    ) -> AccessContext:
        decision = await authorize(db, principal, permission_name)
        if check_plan and settings.ENFORCE_PLAN_VALIDITY and decision.tenant_scope:
            await ensure_plan_valid(db, decision.tenant_scope)
        return AccessContext(principal=principal, tenant_scope=decision.tenant_scope)

    dependency.__name__ = f"require_{permission_name.replace('.', '_')}"
    return dependency
