"""
Super-admin model.

Platform operators. Stored like any other principal so a status flip revokes
every token issued to them.
"""
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, RecordStatus


class SuperAdmin(BaseModel):
    __tablename__ = "super_admins"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False)

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<SuperAdmin {self.email}>"
