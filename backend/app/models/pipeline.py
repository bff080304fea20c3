"""
Sales pipeline and stage models for CRM module.
"""
from typing import Optional
from enum import Enum
from sqlalchemy import String, Text, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, RecordStatus


class StageType(str, Enum):
    OPEN = "open"
    CLOSE_POSITIVE = "closePositive"
    CLOSE_NEGATIVE = "closeNegative"


class Pipeline(BaseModel):
    __tablename__ = "pipelines"

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

    stages: Mapped[list["Stage"]] = relationship(
        "Stage",
        back_populates="pipeline",
        order_by="Stage.serial_number"
    )

    def __repr__(self) -> str:
        return f"<Pipeline {self.name}>"


class Stage(BaseModel):
    __tablename__ = "stages"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    pipeline_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("pipelines.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    serial_number: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    stage_type: Mapped[StageType] = mapped_column(
        SQLEnum(
            StageType,
            name="stagetype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=StageType.OPEN,
        nullable=False
    )
    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)

    pipeline: Mapped["Pipeline"] = relationship("Pipeline", back_populates="stages")

    def __repr__(self) -> str:
        return f"<Stage {self.name} #{self.serial_number}>"
