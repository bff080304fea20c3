"""
Note model for CRM module.

Notes hang off any other CRM record through ``module`` + ``module_id``.
"""
from typing import Optional
from sqlalchemy import String, Text, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, RecordStatus


class Note(BaseModel):
    __tablename__ = "notes"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    module: Mapped[str] = mapped_column(String(50), nullable=False)
    module_id: Mapped[str] = mapped_column(String(15), nullable=False, index=True)

    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)

    def __repr__(self) -> str:
        return f"<Note {self.title}>"
