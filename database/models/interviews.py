"""
Interview Models

Scheduled meetings attached to an application. An application may hold
several interviews at once; scheduling another one never replaces a prior row.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Integer,
    Text,
    Enum as SQLEnum,
    Index,
)
from database.engine import Base, IdType
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.applications import Application


class InterviewStatus(str, PyEnum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"


# Statuses that still count as an upcoming commitment for the job seeker
UPCOMING_INTERVIEW_STATUSES: frozenset[InterviewStatus] = frozenset(
    {InterviewStatus.SCHEDULED, InterviewStatus.CONFIRMED}
)


class Interview(Base):
    __tablename__ = "interviews"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )
    application_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    scheduled_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    scheduled_time: Mapped[str] = mapped_column(String(20), nullable=False)
    is_virtual: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    meeting_link: Mapped[str | None] = mapped_column(String(500))
    location: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[InterviewStatus] = mapped_column(
        SQLEnum(InterviewStatus, name="interview_status"),
        default=InterviewStatus.SCHEDULED,
        nullable=False,
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)

    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, onupdate=now, nullable=False
    )

    application: Mapped["Application"] = relationship(
        "Application", back_populates="interviews", lazy="raise"
    )

    __table_args__ = (
        Index("idx_interviews_status_date", "status", "scheduled_date"),
    )
