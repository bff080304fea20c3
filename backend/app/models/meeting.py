"""
Meeting model for CRM module.
"""
from typing import Optional
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Integer, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, RecordStatus, ActorKind
from app.models.lead import actor_kind_column


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class MeetingType(str, Enum):
    PERSON = "person"
    ON_CALL = "on-call"
    VIRTUAL = "virtual"


class Meeting(BaseModel):
    __tablename__ = "meetings"

    organization_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    meeting_status: Mapped[MeetingStatus] = mapped_column(
        SQLEnum(
            MeetingStatus,
            name="meetingstatus",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        default=MeetingStatus.SCHEDULED,
        nullable=False
    )
    meeting_type: Mapped[MeetingType] = mapped_column(
        SQLEnum(
            MeetingType,
            name="meetingtype",
            create_constraint=True,
            values_callable=lambda x: [e.value for e in x]
        ),
        nullable=False
    )
    location: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[int] = mapped_column(Integer, default=RecordStatus.ACTIVE, nullable=False, index=True)

    created_by: Mapped[str] = mapped_column(String(15), nullable=False)
    created_by_kind: Mapped[ActorKind] = actor_kind_column()
    updated_by: Mapped[str] = mapped_column(String(15), nullable=False)
    updated_by_kind: Mapped[ActorKind] = actor_kind_column()

    def __repr__(self) -> str:
        return f"<Meeting {self.title}>"
