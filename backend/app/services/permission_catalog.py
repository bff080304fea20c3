"""
Permission catalog.

Permissions are defined by super-admins; organizations bind them to their
own team members. Uniqueness (permission name, member/permission pair) is
left to the database constraints and an ``IntegrityError`` becomes
``Conflict``.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidFormat, NotFound
from app.db.base import flush_or_conflict
from app.models.permission import (
    Permission, TeamMemberPermission, is_valid_permission_name
)
from app.models.team_member import TeamMember

logger = logging.getLogger(__name__)

INVALID_NAME_MESSAGE = "Permission name must look like <module>.<create|read|update|delete>"


# ============================================================================
# PERMISSIONS
# ============================================================================

async def define(db: AsyncSession, name: str, description: str = "") -> Permission:
    """Create a permission. InvalidFormat on a bad name, Conflict on a duplicate."""
    if not is_valid_permission_name(name):
        raise InvalidFormat(INVALID_NAME_MESSAGE)

    permission = Permission(name=name, description=description or "")
    db.add(permission)
    await flush_or_conflict(db, "Permission already exists")
    logger.info("Defined permission %s", name)
    return permission


async def define_many(db: AsyncSession, items: Iterable[tuple[str, str]]) -> list[Permission]:
    """Create several permissions at once; nothing is kept if any one fails."""
    items = list(items)
    invalid = [name for name, _ in items if not is_valid_permission_name(name)]
    if invalid:
        raise InvalidFormat(INVALID_NAME_MESSAGE, data={"invalid": invalid})

    permissions = [Permission(name=name, description=description or "") for name, description in items]
    db.add_all(permissions)
    await flush_or_conflict(db, "Some permissions already exist")
    logger.info("Defined %d permissions", len(permissions))
    return permissions


async def list_permissions(db: AsyncSession) -> list[Permission]:
    result = await db.execute(select(Permission).order_by(Permission.name))
    return list(result.scalars().all())


async def get_permission(db: AsyncSession, permission_id: str) -> Permission:
    permission = await db.get(Permission, permission_id)
    if permission is None:
        raise NotFound("Permission not found")
    return permission


async def update_permission(
    db: AsyncSession,
    permission_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Permission:
    permission = await get_permission(db, permission_id)
    if name is not None:
        if not is_valid_permission_name(name):
            raise InvalidFormat(INVALID_NAME_MESSAGE)
        permission.name = name
    if description is not None:
        permission.description = description
    await flush_or_conflict(db, "Permission already exists")
    return permission


async def delete_permission(db: AsyncSession, permission_id: str) -> None:
    permission = await get_permission(db, permission_id)
    await db.delete(permission)
    await db.flush()
    logger.info("Deleted permission %s", permission_id)


# ============================================================================
# ASSIGNMENTS
# ============================================================================

async def _get_tenant_team_member(
    db: AsyncSession, organization_id: str, team_member_id: str
) -> TeamMember:
    result = await db.execute(
        select(TeamMember).where(
            TeamMember.id == team_member_id,
            TeamMember.organization_id == organization_id,
        )
    )
    team_member = result.scalar_one_or_none()
    if team_member is None:
        raise NotFound("Team member not found")
    return team_member


async def assign(
    db: AsyncSession, organization_id: str, team_member_id: str, permission_id: str
) -> TeamMemberPermission:
    """Bind a permission to one of the organization's team members."""
    await _get_tenant_team_member(db, organization_id, team_member_id)
    await get_permission(db, permission_id)

    assignment = TeamMemberPermission(team_member_id=team_member_id, permission_id=permission_id)
    db.add(assignment)
    await flush_or_conflict(db, "Permission already assigned")
    logger.info("Assigned permission %s to team member %s", permission_id, team_member_id)
    return assignment


async def get_assignment(
    db: AsyncSession, organization_id: str, assignment_id: str
) -> TeamMemberPermission:
    """Fetch an assignment only if its team member belongs to the organization."""
    result = await db.execute(
        select(TeamMemberPermission)
        .join(TeamMember, TeamMember.id == TeamMemberPermission.team_member_id)
        .where(
            TeamMemberPermission.id == assignment_id,
            TeamMember.organization_id == organization_id,
        )
    )
    assignment = result.scalar_one_or_none()
    if assignment is None:
        raise NotFound("Assignment not found")
    return assignment


async def list_assignments(
    db: AsyncSession, organization_id: str, team_member_id: str
) -> list[tuple[TeamMemberPermission, Permission]]:
    await _get_tenant_team_member(db, organization_id, team_member_id)
    result = await db.execute(
        select(TeamMemberPermission, Permission)
        .join(Permission, Permission.id == TeamMemberPermission.permission_id)
        .where(TeamMemberPermission.team_member_id == team_member_id)
        .order_by(Permission.name)
    )
    return [(assignment, permission) for assignment, permission in result.all()]


async def reassign(
    db: AsyncSession, organization_id: str, assignment_id: str, permission_id: str
) -> TeamMemberPermission:
    """Point an existing assignment at a different permission."""
    assignment = await get_assignment(db, organization_id, assignment_id)
    await get_permission(db, permission_id)
    assignment.permission_id = permission_id
    await flush_or_conflict(db, "Permission already assigned")
    return assignment


async def revoke(db: AsyncSession, organization_id: str, assignment_id: str) -> None:
    assignment = await get_assignment(db, organization_id, assignment_id)
    await db.delete(assignment)
    await db.flush()
    logger.info("Revoked assignment %s", assignment_id)


async def effective_permission_names(db: AsyncSession, team_member_id: str) -> frozenset[str]:
    """All permission names currently assigned to the team member."""
    result = await db.execute(
        select(Permission.name)
        .join(TeamMemberPermission, TeamMemberPermission.permission_id == Permission.id)
        .where(TeamMemberPermission.team_member_id == team_member_id)
    )
    return frozenset(result.scalars().all())
