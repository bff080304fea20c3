"""
Lead model for CRM module.

A lead is a deal moving through one of the organization's pipelines. The
writer of each create/update is recorded as a tagged actor reference
(``*_by`` id plus ``*_by_kind``) because either the organization itself or
one of its team members can be the author.
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy import String, Text, Integer, Numeric, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, RecordStatus, ActorKind


def actor_kind_column() -> Mapped[ActorKind]:
    return mapped_column(
        SQLEnum(
            ActorKind,
            name="actorkind",
            create_constraint=False,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )


class Lead(BaseModel):
    __tablename__ = "leads"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    pipeline_id: Mapped[str] = mapped_column(
        String(15), ForeignKey("pipelines.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    stage_id: Mapped[str] = mapped_column(
        String(15), ForeignKey("stages.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(
        String(15), ForeignKey("team_members.id", ondelete="SET NULL"), nullable=True, index=True
    )
    product_id: Mapped[Optional[str]] = mapped_column(
        String(15), ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    company_id: Mapped[Optional[str]] = mapped_column(
        String(15), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    contact_id: Mapped[Optional[str]] = mapped_column(
        String(15), ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True
    )
    meeting_id: Mapped[Optional[str]] = mapped_column(
        String(15), ForeignKey("meetings.id", ondelete="SET NULL"), nullable=True
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)

    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)

    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    created_by_kind: Mapped[ActorKind] = actor_kind_column()
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by_kind: Mapped[ActorKind] = actor_kind_column()

    def __repr__(self) -> str:
        return f"<Lead {self.name}>"
