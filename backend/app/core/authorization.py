"""
Authorization decision point.

``authorize`` answers one question per request: may this principal exercise
the named permission, and which tenant must the work stay inside.

- super-admins are allowed and carry no tenant scope
- organizations are allowed for every permission inside their own tenant
- team members are allowed only for permissions assigned to them, and are
  always scoped to their organization
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Forbidden
from app.core.identity import Principal, PrincipalKind
from app.services import permission_catalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    tenant_scope: Optional[str]


async def authorize(db: AsyncSession, principal: Principal, required_permission: str) -> Decision:
    if principal.kind == PrincipalKind.SUPER_ADMIN:
        return Decision(allowed=True, tenant_scope=None)

    if principal.kind == PrincipalKind.ORGANIZATION:
        return Decision(allowed=True, tenant_scope=principal.id)

    tenant_scope = principal.organization_id
    granted = await permission_catalog.effective_permission_names(db, principal.id)
    if required_permission not in granted:
        logger.info(
            "Denied %s to team member %s (org %s)",
            required_permission, principal.id, tenant_scope,
        )
        raise Forbidden(
            f"Forbidden: missing permission {required_permission}",
            tenant_scope=tenant_scope,
        )
    return Decision(allowed=True, tenant_scope=tenant_scope)
