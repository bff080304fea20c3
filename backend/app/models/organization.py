"""
Organization model.

An organization is the tenant root: its own id is the tenant scope of every
record it and its team members create.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime, timedelta, timezone
from sqlalchemy import String, Text, Integer, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, RecordStatus

if TYPE_CHECKING:
    from app.models.plan import Plan
    from app.models.team_member import TeamMember


class Organization(BaseModel):
    """Organization model."""
    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    pin_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[int] = mapped_column(
        Integer, default=RecordStatus.ACTIVE, nullable=False, index=True
    )

    # Subscription
    plan_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("plans.id", ondelete="SET NULL"),
        nullable=True
    )
    plan_expire_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    plan: Mapped[Optional["Plan"]] = relationship("Plan", foreign_keys=[plan_id])
    team_members: Mapped[list["TeamMember"]] = relationship(
        "TeamMember",
        back_populates="organization",
        cascade="all, delete-orphan"
    )

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def has_valid_plan(self, now: Optional[datetime] = None) -> bool:
        if self.plan_expire_date is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires = self.plan_expire_date
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return expires >= now

    def extend_plan(self, days: int, now: Optional[datetime] = None) -> datetime:
        """Push the plan expiry forward; a lapsed plan restarts from now."""
        now = now or datetime.now(timezone.utc)
        start = now
        if self.has_valid_plan(now):
            start = self.plan_expire_date
            if start.tzinfo is None:
                start = start.replace(tzinfo=timezone.utc)
        self.plan_expire_date = start + timedelta(days=days)
        return self.plan_expire_date

    def __repr__(self) -> str:
        return f"<Organization {self.email}>"
