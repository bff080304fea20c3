"""
Caller details.

Endpoints:
- GET /api/user-details - Name and contact details of the authenticated principal
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.api.v1.auth import TOKEN_ROLES
from app.core.deps import get_current_principal
from app.core.identity import Principal, PrincipalKind
from app.models.organization import Organization
from app.models.super_admin import SuperAdmin
from app.models.team_member import TeamMember
from app.schemas.auth import UserDetails
from app.schemas.common import Envelope, ok

router = APIRouter()

PRINCIPAL_MODELS = {
    PrincipalKind.ORGANIZATION: Organization,
    PrincipalKind.TEAM_MEMBER: TeamMember,
    PrincipalKind.SUPER_ADMIN: SuperAdmin,
}


@router.get("", response_model=Envelope[UserDetails])
async def get_user_details(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Inactive principals never get here; ``resolve`` already answered 401."""
    record = await db.get(PRINCIPAL_MODELS[principal.kind], principal.id)
    phone = getattr(record, "phone", None)
    return ok(
        UserDetails(
            role=TOKEN_ROLES[principal.kind],
            id=record.id,
            name=record.name,
            email=record.email,
            phone=phone,
            contact_number=phone,
        ),
        "User details fetched successfully",
    )
