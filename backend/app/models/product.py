"""
Product and category models for CRM module.
"""
from typing import Optional
from datetime import date
from decimal import Decimal
from sqlalchemy import String, Text, Integer, Numeric, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, RecordStatus


class Category(BaseModel):
    __tablename__ = "categories"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)

    def __repr__(self) -> str:
        return f"<Category {self.name}>"


class Product(BaseModel):
    __tablename__ = "products"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    commission_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tentative_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    owner_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("team_members.id", ondelete="SET NULL"),
        nullable=True
    )

    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)

    def __repr__(self) -> str:
        return f"<Product {self.name}>"
