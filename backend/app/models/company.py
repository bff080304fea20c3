"""
Company model for CRM module.
"""
from typing import Optional
from sqlalchemy import String, Text, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, RecordStatus


class Company(BaseModel):
    """A customer or prospect company tracked by an organization."""
    __tablename__ = "companies"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pincode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    gst_no: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Team member responsible for the account
    owner_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("team_members.id", ondelete="SET NULL"),
        nullable=True
    )

    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)

    def __repr__(self) -> str:
        return f"<Company {self.name}>"
