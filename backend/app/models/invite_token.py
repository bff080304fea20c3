"""
Signup verification and team invitation tokens.
"""
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy import String, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel
from app.models.team_member import TeamMemberRole


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class InviteToken(BaseModel):
    """Single-use invitation for a new team member of an organization."""
    __tablename__ = "invite_tokens"

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    role: Mapped[TeamMemberRole] = mapped_column(
        SQLEnum(
            TeamMemberRole,
            name="teammemberrole",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=TeamMemberRole.SALES,
        nullable=False
    )
    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return _aware(self.expires_at) < now


class EmailVerification(BaseModel):
    """Pending or completed OTP check for an organization signup email."""
    __tablename__ = "email_verifications"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    otp_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return _aware(self.expires_at) < now
