"""
Team member model.

Team members authenticate with their own credentials and act inside the
organization that created them. ``organization_id`` is set once at creation.
"""
from typing import Optional, TYPE_CHECKING
from enum import Enum
from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from app.models.base import BaseModel, RecordStatus

if TYPE_CHECKING:
    from app.models.organization import Organization
    from app.models.permission import TeamMemberPermission


class TeamMemberRole(str, Enum):
    ADMIN = "admin"
    SALES = "sales"


class TeamMember(BaseModel):
    """Team member belonging to exactly one organization."""
    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_team_members_org_name"),
    )

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    domain_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

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
    status: Mapped[int] = mapped_column(
        Integer, default=RecordStatus.ACTIVE, nullable=False, index=True
    )

    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="team_members"
    )
    permission_assignments: Mapped[list["TeamMemberPermission"]] = relationship(
        "TeamMemberPermission",
        back_populates="team_member",
        cascade="all, delete-orphan"
    )

    @validates("organization_id")
    def _freeze_organization(self, key, value):
        current = self.__dict__.get("organization_id")
        if current is not None and value != current:
            raise ValueError("organization_id of a team member cannot change")
        return value

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<TeamMember {self.name} org={self.organization_id}>"
