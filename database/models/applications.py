"""
Application Models

A job seeker's submission against one job, carrying a review status.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    ForeignKey,
    DateTime,
    Integer,
    Text,
    Enum as SQLEnum,
    Index,
    UniqueConstraint,
)
from database.engine import Base, IdType
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from database.models.jobs import Job
    from database.models.interviews import Interview
    from database.models.attachments import Attachment


class ApplicationStatus(str, PyEnum):
    """Review status of an application (persisted vocabulary)."""

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    SHORTLISTED = "SHORTLISTED"
    REJECTED = "REJECTED"
    HIRED = "HIRED"


class Application(Base):
    """
    At most one application per (job, job seeker) pair.
    """

    __tablename__ = "applications"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )
    job_id: Mapped[int] = mapped_column(
        IdType,
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    job_seeker_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus, name="application_status"),
        default=ApplicationStatus.PENDING,
        nullable=False,
        index=True,
    )
    cover_letter: Mapped[str | None] = mapped_column(Text)

    # Optimistic concurrency token, bumped on every status change
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, onupdate=now, nullable=False
    )

    # Relationships
    job: Mapped["Job"] = relationship(
        "Job", back_populates="applications", lazy="selectin"
    )
    interviews: Mapped[list["Interview"]] = relationship(
        "Interview", back_populates="application", lazy="raise", passive_deletes=True
    )
    attachments: Mapped[list["Attachment"]] = relationship(
        "Attachment",
        primaryjoin="Application.id == Attachment.application_id",
        cascade="all, delete-orphan",
        lazy="selectin",
        passive_deletes=True,
        order_by="Attachment.id",
    )

    __table_args__ = (
        UniqueConstraint("job_id", "job_seeker_id", name="uq_application_job_seeker"),
        Index("idx_applications_seeker_applied", "job_seeker_id", "applied_at"),
    )
