"""
Token introspection for other services.

Endpoints:
- POST /api/auth/verify-token - Verify a token and resolve its principal
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.core import security
from app.core.identity import Principal, PrincipalKind, resolve
from app.schemas.auth import VerifyTokenRequest, VerifyTokenData
from app.schemas.common import Envelope, ok

router = APIRouter()

TOKEN_ROLES = {
    PrincipalKind.ORGANIZATION: security.ROLE_ORGANIZATION,
    PrincipalKind.TEAM_MEMBER: security.ROLE_TEAM_MEMBER,
    PrincipalKind.SUPER_ADMIN: security.ROLE_SUPERADMIN,
}


def principal_to_token_data(principal: Principal) -> VerifyTokenData:
    return VerifyTokenData(
        valid=True,
        role=TOKEN_ROLES[principal.kind],
        id=principal.id,
        organization_id=principal.tenant_scope,
    )


@router.post("/verify-token", response_model=Envelope[VerifyTokenData])
async def verify_token(
    body: VerifyTokenRequest,
    db: AsyncSession = Depends(get_db),
):
    """Check signature and expiry, then confirm the principal is still active."""
    claims = security.verify(body.token)
    principal = await resolve(db, claims)
    return ok(principal_to_token_data(principal), "Token is valid")
