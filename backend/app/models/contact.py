"""
Contact model for CRM module.

Contacts are people at customer companies.
"""
from typing import Optional
from sqlalchemy import String, Text, Integer, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, RecordStatus


class Contact(BaseModel):
    __tablename__ = "contacts"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    phone_numbers: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pincode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    company_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("companies.id", ondelete="SET NULL"),
        nullable=True
    )
    owner_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("team_members.id", ondelete="SET NULL"),
        nullable=True
    )

    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)

    def __repr__(self) -> str:
        return f"<Contact {self.name}>"
