"""
Identity resolution: verified token claims -> acting principal.

The role carried in a token is only a hint. Every principal is re-loaded
from the database and must still be active before it is trusted.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Unauthorized
from app.core.security import Claims, ROLE_ORGANIZATION, ROLE_TEAM_MEMBER, ROLE_SUPERADMIN
from app.models.base import ActorKind, RecordStatus
from app.models.organization import Organization
from app.models.team_member import TeamMember
from app.models.super_admin import SuperAdmin

logger = logging.getLogger(__name__)

TEAM_MEMBER_ROLES = (ROLE_TEAM_MEMBER, "teamMember")


class PrincipalKind(str, Enum):
    ORGANIZATION = "organization"
    TEAM_MEMBER = "teamMember"
    SUPER_ADMIN = "superAdmin"


@dataclass(frozen=True)
class Principal:
    """The resolved acting identity for one request."""
    kind: PrincipalKind
    id: str
    organization_id: Optional[str] = None

    @property
    def tenant_scope(self) -> Optional[str]:
        """Organization id all data access is confined to (None for super-admin)."""
        if self.kind == PrincipalKind.ORGANIZATION:
            return self.id
        if self.kind == PrincipalKind.TEAM_MEMBER:
            return self.organization_id
        return None

    @property
    def actor_kind(self) -> ActorKind:
        if self.kind == PrincipalKind.ORGANIZATION:
            return ActorKind.ORGANIZATION
        if self.kind == PrincipalKind.TEAM_MEMBER:
            return ActorKind.TEAM_MEMBER
        raise ValueError("super-admins do not author tenant records")

    @property
    def is_organization(self) -> bool:
        return self.kind == PrincipalKind.ORGANIZATION

    @property
    def is_team_member(self) -> bool:
        return self.kind == PrincipalKind.TEAM_MEMBER

    @property
    def is_super_admin(self) -> bool:
        return self.kind == PrincipalKind.SUPER_ADMIN

    @classmethod
    def for_organization(cls, organization: Organization) -> "Principal":
        return cls(PrincipalKind.ORGANIZATION, organization.id)

    @classmethod
    def for_team_member(cls, team_member: TeamMember) -> "Principal":
        return cls(PrincipalKind.TEAM_MEMBER, team_member.id, team_member.organization_id)

    @classmethod
    def for_super_admin(cls, super_admin: SuperAdmin) -> "Principal":
        return cls(PrincipalKind.SUPER_ADMIN, super_admin.id)


async def get_active_organization(db: AsyncSession, organization_id: str) -> Optional[Organization]:
    result = await db.execute(
        select(Organization).where(
            Organization.id == organization_id,
            Organization.status == RecordStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


async def get_active_team_member(db: AsyncSession, team_member_id: str) -> Optional[TeamMember]:
    """Active team member of an active organization."""
    result = await db.execute(
        select(TeamMember)
        .join(Organization, Organization.id == TeamMember.organization_id)
        .where(
            TeamMember.id == team_member_id,
            TeamMember.status == RecordStatus.ACTIVE,
            Organization.status == RecordStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


async def get_active_super_admin(db: AsyncSession, super_admin_id: str) -> Optional[SuperAdmin]:
    result = await db.execute(
        select(SuperAdmin).where(
            SuperAdmin.id == super_admin_id,
            SuperAdmin.status == RecordStatus.ACTIVE,
        )
    )
    return result.scalar_one_or_none()


async def resolve(db: AsyncSession, claims: Claims) -> Principal:
    """Load the principal named by ``claims`` or fail closed with Unauthorized.

    Lookup order for tokens without an explicit organization or super-admin
    role is organization first, then team member.
    """
    role = claims.role
    subject_id = claims.subject_id

    if role == ROLE_SUPERADMIN:
        super_admin = await get_active_super_admin(db, subject_id)
        if super_admin is None:
            logger.warning("Rejected super-admin token for unknown or inactive id %s", subject_id)
            raise Unauthorized("Unauthorized super admin")
        return Principal.for_super_admin(super_admin)

    if role == ROLE_ORGANIZATION:
        organization = await get_active_organization(db, subject_id)
        if organization is None:
            logger.warning("Rejected organization token for unknown or inactive id %s", subject_id)
            raise Unauthorized("Unauthorized organization")
        return Principal.for_organization(organization)

    if role is not None and role not in TEAM_MEMBER_ROLES:
        logger.warning("Rejected token with unrecognised role %r", role)
        raise Unauthorized()

    organization = await get_active_organization(db, subject_id)
    if organization is not None:
        return Principal.for_organization(organization)

    team_member = await get_active_team_member(db, subject_id)
    if team_member is not None:
        return Principal.for_team_member(team_member)

    logger.warning("Rejected token for unknown or inactive principal %s", subject_id)
    raise Unauthorized("Unauthorized team member")
