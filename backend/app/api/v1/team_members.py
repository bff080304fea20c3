"""
Team member endpoints.

Endpoints:
- POST /api/team-member/login - Team member login
- POST /api/team-member - Create a team member (organization)
- GET /api/team-member - List the tenant's team members
- GET /api/team-member/me - Own profile (team member)
- GET /api/team-member/me/permissions - Own effective permissions
- PUT /api/team-member/me - Edit own profile (team member)
- PUT /api/team-member/status - Activate/deactivate (organization)
- PUT /api/team-member/reset-password - Set a new password (organization)
- POST /api/team-member/invite - Email an invitation (organization)
- POST /api/team-member/register - Accept an invitation
- GET /api/team-member/{team_member_id} - Get one team member
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db, flush_or_conflict
from app.core.config import settings
from app.core.deps import AccessContext, require_organization, require_team_member, require_tenant_member
from app.core.exceptions import InvalidFormat, NotFound, Unauthorized
from app.core.identity import Principal
from app.core.security import (
    ROLE_TEAM_MEMBER, create_access_token, generate_invite_token, get_password_hash, verify_password,
)
from app.core.tenancy import get_scoped_or_404, paginate, scoped
from app.models.base import RecordStatus
from app.models.invite_token import InviteToken
from app.models.organization import Organization
from app.models.team_member import TeamMember, TeamMemberRole
from app.schemas.auth import LoginRequest, TokenData
from app.schemas.common import Envelope, PaginatedResponse, ok
from app.schemas.team_member import (
    TeamMemberCreate, TeamMemberProfileUpdate, TeamMemberStatusUpdate, TeamMemberPasswordReset,
    TeamMemberInvite, TeamMemberRegister, TeamMemberResponse,
)
from app.services import permission_catalog
from app.services.email import email_service

logger = logging.getLogger(__name__)

router = APIRouter()

DUPLICATE_NAME_MESSAGE = "A team member with this name already exists"


@router.post("/login", response_model=Envelope[TokenData])
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate by email; the same email may exist in several organizations.

    An active member of an active organization wins over any inactive match.
    """
    result = await db.execute(
        select(TeamMember, Organization.status)
        .join(Organization, Organization.id == TeamMember.organization_id)
        .where(TeamMember.email == credentials.email.lower())
    )
    matches = [
        (candidate, organization_status)
        for candidate, organization_status in result.all()
        if verify_password(credentials.password, candidate.password_hash)
    ]
    if not matches:
        raise Unauthorized("Invalid email or password")

    team_member = next(
        (
            candidate for candidate, organization_status in matches
            if candidate.is_active and organization_status == RecordStatus.ACTIVE
        ),
        None,
    )
    if team_member is None:
        logger.warning(
            "Login attempt for inactive team member(s) %s",
            ", ".join(candidate.id for candidate, _ in matches),
        )
        raise Unauthorized("Account is inactive")

    token = create_access_token(subject=team_member.id, role=ROLE_TEAM_MEMBER)
    return ok(
        TokenData(
            token=token,
            role=ROLE_TEAM_MEMBER,
            id=team_member.id,
            organization_id=team_member.organization_id,
        ),
        "Login successful",
    )


@router.post("", response_model=Envelope[TeamMemberResponse], status_code=status.HTTP_201_CREATED)
async def create_team_member(
    member_data: TeamMemberCreate,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    team_member = TeamMember(
        organization_id=principal.id,
        name=member_data.name,
        full_name=member_data.full_name,
        email=member_data.email.lower() if member_data.email else None,
        phone=member_data.phone,
        password_hash=get_password_hash(member_data.password),
        role=member_data.role,
    )
    db.add(team_member)
    await flush_or_conflict(db, DUPLICATE_NAME_MESSAGE)
    await db.refresh(team_member)

    logger.info("Organization %s created team member %s", principal.id, team_member.id)
    return ok(TeamMemberResponse.model_validate(team_member), "Team member created successfully")


@router.get("", response_model=Envelope[PaginatedResponse[TeamMemberResponse]])
async def list_team_members(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: Optional[int] = Query(None, ge=0, le=1),
    role: Optional[TeamMemberRole] = Query(None),
    search: Optional[str] = Query(None, description="Search name/email"),
    ctx: AccessContext = Depends(require_tenant_member),
    db: AsyncSession = Depends(get_db),
):
    query = scoped(select(TeamMember), TeamMember, ctx.tenant_scope)
    if status is not None:
        query = query.where(TeamMember.status == status)
    if role:
        query = query.where(TeamMember.role == role)
    if search:
        query = query.where(
            TeamMember.name.ilike(f"%{search}%") | TeamMember.email.ilike(f"%{search}%")
        )

    page_data = await paginate(db, query, TeamMember.created.desc(), page, perPage)
    page_data["items"] = [TeamMemberResponse.model_validate(m) for m in page_data["items"]]
    return ok(page_data, "Team members fetched successfully")


@router.get("/me", response_model=Envelope[TeamMemberResponse])
async def get_me(
    principal: Principal = Depends(require_team_member),
    db: AsyncSession = Depends(get_db),
):
    team_member = await db.get(TeamMember, principal.id)
    return ok(TeamMemberResponse.model_validate(team_member))


@router.get("/me/permissions", response_model=Envelope[list[str]])
async def get_my_permissions(
    principal: Principal = Depends(require_team_member),
    db: AsyncSession = Depends(get_db),
):
    names = await permission_catalog.effective_permission_names(db, principal.id)
    return ok(sorted(names))


@router.put("/me", response_model=Envelope[TeamMemberResponse])
async def update_me(
    profile: TeamMemberProfileUpdate,
    principal: Principal = Depends(require_team_member),
    db: AsyncSession = Depends(get_db),
):
    team_member = await db.get(TeamMember, principal.id)
    changes = profile.model_dump(exclude_unset=True, exclude_none=True)

    password = changes.pop("password", None)
    if password:
        team_member.password_hash = get_password_hash(password)
    for field, value in changes.items():
        setattr(team_member, field, value)

    await db.flush()
    await db.refresh(team_member)
    return ok(TeamMemberResponse.model_validate(team_member), "Profile updated successfully")


@router.put("/status", response_model=Envelope[TeamMemberResponse])
async def update_status(
    body: TeamMemberStatusUpdate,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    """Deactivating a team member invalidates every token it holds."""
    team_member = await get_scoped_or_404(db, TeamMember, body.team_member_id, principal.id, "Team member")
    team_member.status = body.status
    await db.flush()
    await db.refresh(team_member)

    logger.info("Team member %s status set to %s", team_member.id, body.status)
    return ok(TeamMemberResponse.model_validate(team_member), "Status updated successfully")


@router.put("/reset-password", response_model=Envelope[None])
async def reset_password(
    body: TeamMemberPasswordReset,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    team_member = await get_scoped_or_404(db, TeamMember, body.team_member_id, principal.id, "Team member")
    team_member.password_hash = get_password_hash(body.new_password)
    await db.flush()
    return ok(None, "Password reset successfully")


# ============================================================================
# INVITATIONS
# ============================================================================

@router.post("/invite", response_model=Envelope[None], status_code=status.HTTP_201_CREATED)
async def invite(
    body: TeamMemberInvite,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    organization = await db.get(Organization, principal.id)
    invite_token = InviteToken(
        email=body.email.lower(),
        token=generate_invite_token(),
        role=body.role,
        organization_id=principal.id,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.INVITE_EXPIRE_HOURS),
    )
    db.add(invite_token)
    await db.flush()

    await email_service.send_team_invite(
        invite_token.email,
        organization.name,
        invite_token.role.value,
        invite_token.token,
        settings.INVITE_EXPIRE_HOURS,
    )
    return ok(None, "Invitation sent successfully")


@router.post("/register", response_model=Envelope[TeamMemberResponse], status_code=status.HTTP_201_CREATED)
async def register(
    body: TeamMemberRegister,
    db: AsyncSession = Depends(get_db),
):
    """Create the invited team member; the invitation is consumed."""
    result = await db.execute(select(InviteToken).where(InviteToken.token == body.token))
    invite_token = result.scalar_one_or_none()

    if invite_token is None:
        raise NotFound("Invitation not found")
    if invite_token.is_expired():
        raise InvalidFormat("Invitation expired")
    if invite_token.email != body.email.lower():
        raise InvalidFormat("Email does not match the invitation")

    team_member = TeamMember(
        organization_id=invite_token.organization_id,
        name=body.name,
        email=invite_token.email,
        password_hash=get_password_hash(body.password),
        role=invite_token.role,
    )
    db.add(team_member)
    await flush_or_conflict(db, DUPLICATE_NAME_MESSAGE)
    await db.delete(invite_token)
    await db.flush()
    await db.refresh(team_member)

    logger.info("Team member %s registered from invitation", team_member.id)
    return ok(TeamMemberResponse.model_validate(team_member), "Registration successful")


@router.get("/{team_member_id}", response_model=Envelope[TeamMemberResponse])
async def get_team_member(
    team_member_id: str,
    ctx: AccessContext = Depends(require_tenant_member),
    db: AsyncSession = Depends(get_db),
):
    team_member = await get_scoped_or_404(db, TeamMember, team_member_id, ctx.tenant_scope, "Team member")
    return ok(TeamMemberResponse.model_validate(team_member))
