"""
Permission catalog models.

A permission is a named capability ``<module>.<action>``; team members get
them one row at a time through ``TeamMemberPermission``.
"""
import re
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.team_member import TeamMember


PERMISSION_ACTIONS = ("create", "read", "update", "delete")
PERMISSION_NAME_RE = re.compile(r"^[a-zA-Z0-9]+\.(create|update|read|delete)$")


def is_valid_permission_name(name: Optional[str]) -> bool:
    return bool(name) and PERMISSION_NAME_RE.match(name) is not None


class Permission(BaseModel):
    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)

    assignments: Mapped[list["TeamMemberPermission"]] = relationship(
        "TeamMemberPermission",
        back_populates="permission",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Permission {self.name}>"


class TeamMemberPermission(BaseModel):
    """Binds one permission to one team member; the pair is unique."""
    __tablename__ = "team_member_permissions"
    __table_args__ = (
        UniqueConstraint(
            "team_member_id", "permission_id",
            name="uq_team_member_permissions_member_permission"
        ),
    )

    team_member_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("team_members.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    permission_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    team_member: Mapped["TeamMember"] = relationship(
        "TeamMember",
        back_populates="permission_assignments"
    )
    permission: Mapped["Permission"] = relationship(
        "Permission",
        back_populates="assignments"
    )

    def __repr__(self) -> str:
        return f"<TeamMemberPermission {self.team_member_id}:{self.permission_id}>"
