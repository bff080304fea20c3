"""
Permission assignment endpoints.

Organizations bind catalog permissions to their own team members. Every
lookup is confined to the calling organization; another tenant's assignment
is reported as not found.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.core.deps import require_organization
from app.core.identity import Principal
from app.models.permission import Permission, TeamMemberPermission
from app.schemas.common import Envelope, ok
from app.schemas.permission import AssignmentCreate, AssignmentUpdate, AssignmentResponse
from app.services import permission_catalog

router = APIRouter()


def assignment_to_response(
    assignment: TeamMemberPermission, permission: Permission = None
) -> AssignmentResponse:
    return AssignmentResponse(
        id=assignment.id,
        team_member_id=assignment.team_member_id,
        permission_id=assignment.permission_id,
        permission_name=permission.name if permission else None,
        created=assignment.created,
        updated=assignment.updated,
    )


@router.post("", response_model=Envelope[AssignmentResponse], status_code=status.HTTP_201_CREATED)
async def assign_permission(
    body: AssignmentCreate,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    assignment = await permission_catalog.assign(db, principal.id, body.team_member_id, body.permission_id)
    await db.refresh(assignment)
    permission = await permission_catalog.get_permission(db, assignment.permission_id)
    return ok(assignment_to_response(assignment, permission), "Permission assigned successfully")


@router.get("", response_model=Envelope[list[AssignmentResponse]])
async def list_assignments(
    team_member_id: str = Query(...),
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    rows = await permission_catalog.list_assignments(db, principal.id, team_member_id)
    return ok(
        [assignment_to_response(assignment, permission) for assignment, permission in rows],
        "Assignments fetched successfully",
    )


@router.get("/{assignment_id}", response_model=Envelope[AssignmentResponse])
async def get_assignment(
    assignment_id: str,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    assignment = await permission_catalog.get_assignment(db, principal.id, assignment_id)
    permission = await permission_catalog.get_permission(db, assignment.permission_id)
    return ok(assignment_to_response(assignment, permission))


@router.put("/{assignment_id}", response_model=Envelope[AssignmentResponse])
async def update_assignment(
    assignment_id: str,
    body: AssignmentUpdate,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    assignment = await permission_catalog.reassign(db, principal.id, assignment_id, body.permission_id)
    await db.refresh(assignment)
    permission = await permission_catalog.get_permission(db, assignment.permission_id)
    return ok(assignment_to_response(assignment, permission), "Assignment updated successfully")


@router.delete("/{assignment_id}", response_model=Envelope[None])
async def revoke_assignment(
    assignment_id: str,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    await permission_catalog.revoke(db, principal.id, assignment_id)
    return ok(None, "Permission revoked successfully")
