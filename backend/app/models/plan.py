"""
Subscription plan and payment models.
"""
from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, Integer, Numeric, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, RecordStatus

if TYPE_CHECKING:
    from app.models.organization import Organization


class Plan(BaseModel):
    """A purchasable subscription. ``duration`` is in days."""
    __tablename__ = "plans"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False)

    def __repr__(self) -> str:
        return f"<Plan {self.title} ({self.duration}d)>"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Payment(BaseModel):
    __tablename__ = "payments"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    plan_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("plans.id", ondelete="RESTRICT"),
        nullable=False
    )
    gateway_order_id: Mapped[str] = mapped_column(String(100), nullable=False)
    gateway_payment_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(
            PaymentStatus,
            name="paymentstatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=PaymentStatus.PENDING,
        nullable=False
    )

    organization: Mapped["Organization"] = relationship("Organization")
    plan: Mapped["Plan"] = relationship("Plan")

    def __repr__(self) -> str:
        return f"<Payment {self.gateway_payment_id} ({self.status.value})>"
