"""
Organization endpoints.

Endpoints:
- POST /api/organization/send-otp - Email a signup verification code
- POST /api/organization/verify-otp - Confirm the code
- POST /api/organization - Sign up (email must be verified)
- POST /api/organization/login - Organization login
- GET/PUT/DELETE /api/organization/me - Own profile
- GET /api/organization - List organizations (super-admin)
- PUT /api/organization/{organization_id}/status - Activate/deactivate (super-admin)
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db, flush_or_conflict
from app.core.config import settings
from app.core.deps import require_organization, require_super_admin
from app.core.exceptions import Conflict, InvalidFormat, NotFound, Unauthorized
from app.core.identity import Principal
from app.core.security import (
    ROLE_ORGANIZATION, create_access_token, generate_otp, get_password_hash, verify_password,
)
from app.core.tenancy import paginate
from app.models.invite_token import EmailVerification
from app.models.organization import Organization
from app.schemas.auth import LoginRequest, TokenData
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.organization import (
    SendOtpRequest, VerifyOtpRequest, OrganizationCreate, OrganizationUpdate, OrganizationResponse,
)
from app.services.email import email_service

logger = logging.getLogger(__name__)

router = APIRouter()


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(Organization.id).where(Organization.email == email))
    return result.scalar_one_or_none() is not None


# ============================================================================
# SIGNUP
# ============================================================================

@router.post("/send-otp", response_model=Envelope[None])
async def send_otp(
    body: SendOtpRequest,
    db: AsyncSession = Depends(get_db),
):
    """Issue a fresh code for ``email``, replacing any earlier one."""
    email = body.email.lower()
    if await _email_taken(db, email):
        raise Conflict("Email already registered")

    otp = generate_otp()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

    result = await db.execute(select(EmailVerification).where(EmailVerification.email == email))
    verification = result.scalar_one_or_none()
    if verification is None:
        verification = EmailVerification(email=email, otp_hash="", expires_at=expires_at)
        db.add(verification)
    verification.otp_hash = get_password_hash(otp)
    verification.expires_at = expires_at
    verification.verified_at = None
    await db.flush()

    await email_service.send_signup_otp(email, otp, settings.OTP_EXPIRE_MINUTES)
    return ok(None, "OTP sent successfully")


@router.post("/verify-otp", response_model=Envelope[None])
async def verify_otp(
    body: VerifyOtpRequest,
    db: AsyncSession = Depends(get_db),
):
    email = body.email.lower()
    result = await db.execute(select(EmailVerification).where(EmailVerification.email == email))
    verification = result.scalar_one_or_none()

    if verification is None:
        raise NotFound("No OTP requested for this email")
    if verification.is_expired():
        raise InvalidFormat("OTP expired")
    if not verify_password(body.otp, verification.otp_hash):
        raise InvalidFormat("Invalid OTP")

    verification.verified_at = datetime.now(timezone.utc)
    await db.flush()
    return ok(None, "Email verified successfully")


@router.post("", response_model=Envelope[OrganizationResponse], status_code=status.HTTP_201_CREATED)
async def signup(
    org_data: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an organization. Requires a verified email from ``verify-otp``."""
    email = org_data.email.lower()
    result = await db.execute(
        select(EmailVerification).where(
            EmailVerification.email == email,
            EmailVerification.verified_at.is_not(None),
        )
    )
    if result.scalar_one_or_none() is None:
        raise InvalidFormat("Email is not verified")

    organization = Organization(
        name=org_data.name,
        email=email,
        password_hash=get_password_hash(org_data.password),
        pin_code=org_data.pin_code,
        address=org_data.address,
    )
    db.add(organization)
    await flush_or_conflict(db, "Email already registered")
    await db.execute(delete(EmailVerification).where(EmailVerification.email == email))
    await db.refresh(organization)

    logger.info("Organization %s signed up", organization.id)
    return ok(OrganizationResponse.model_validate(organization), "Organization created successfully")


@router.post("/login", response_model=Envelope[TokenData])
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Organization).where(Organization.email == credentials.email.lower())
    )
    organization = result.scalar_one_or_none()

    if organization is None or not verify_password(credentials.password, organization.password_hash):
        raise Unauthorized("Invalid email or password")
    if not organization.is_active:
        logger.warning("Login attempt for inactive organization %s", organization.id)
        raise Unauthorized("Account is inactive")

    token = create_access_token(subject=organization.id, role=ROLE_ORGANIZATION)
    return ok(
        TokenData(
            token=token,
            role=ROLE_ORGANIZATION,
            id=organization.id,
            organization_id=organization.id,
        ),
        "Login successful",
    )


# ============================================================================
# PROFILE
# ============================================================================

@router.get("/me", response_model=Envelope[OrganizationResponse])
async def get_me(
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    organization = await db.get(Organization, principal.id)
    return ok(OrganizationResponse.model_validate(organization))


@router.put("/me", response_model=Envelope[OrganizationResponse])
async def update_me(
    org_data: OrganizationUpdate,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    """Edit the profile. Plan fields only change through payment verification."""
    organization = await db.get(Organization, principal.id)
    changes = org_data.model_dump(exclude_unset=True, exclude_none=True)

    password = changes.pop("password", None)
    if password:
        organization.password_hash = get_password_hash(password)
    if "email" in changes:
        changes["email"] = changes["email"].lower()

    for field, value in changes.items():
        setattr(organization, field, value)

    await flush_or_conflict(db, "Email already registered")
    await db.refresh(organization)
    return ok(OrganizationResponse.model_validate(organization), "Organization updated successfully")


@router.delete("/me", response_model=Envelope[None])
async def delete_me(
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    """Delete the organization together with its team members and their assignments."""
    organization = await db.get(Organization, principal.id)
    await db.delete(organization)
    await db.flush()
    logger.info("Organization %s deleted itself", principal.id)
    return ok(None, "Organization deleted successfully")


# ============================================================================
# SUPER-ADMIN
# ============================================================================

@router.get("", response_model=Envelope[PaginatedResponse[OrganizationResponse]])
async def list_organizations(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search name/email"),
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(Organization)
    if search:
        query = query.where(
            Organization.name.ilike(f"%{search}%") | Organization.email.ilike(f"%{search}%")
        )

    page_data = await paginate(db, query, Organization.created.desc(), page, perPage)
    page_data["items"] = [OrganizationResponse.model_validate(o) for o in page_data["items"]]
    return ok(page_data, "Organizations fetched successfully")


@router.put("/{organization_id}/status", response_model=Envelope[OrganizationResponse])
async def update_organization_status(
    organization_id: str,
    status_data: StatusUpdate,
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    organization = await db.get(Organization, organization_id)
    if organization is None:
        raise NotFound("Organization not found")

    organization.status = status_data.status
    await db.flush()
    await db.refresh(organization)
    logger.info(
        "Super admin %s set organization %s status to %s",
        principal.id, organization_id, status_data.status,
    )
    return ok(OrganizationResponse.model_validate(organization), "Organization status updated successfully")
