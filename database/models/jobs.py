"""
Jobs Module

Employer-owned job postings with an active flag and an optional
application deadline. The flag is closed lazily by the expiry sweep.
"""

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    String,
    Boolean,
    DateTime,
    Text,
    JSON,
    Float,
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
    from database.models.attachments import Attachment


# ==================== Job Enums ===================== #
class JobStatus(str, PyEnum):
    """Computed posting state exposed to clients."""

    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class JobType(str, PyEnum):
    """Job employment type."""

    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"
    FREELANCE = "FREELANCE"


class ExperienceLevel(str, PyEnum):
    ENTRY_LEVEL = "ENTRY_LEVEL"
    MID_LEVEL = "MID_LEVEL"
    SENIOR_LEVEL = "SENIOR_LEVEL"
    EXECUTIVE = "EXECUTIVE"


class JobCategory(str, PyEnum):
    """Industry category of a posting."""

    TECHNOLOGY = "TECHNOLOGY"
    FINANCE = "FINANCE"
    HEALTHCARE = "HEALTHCARE"
    EDUCATION = "EDUCATION"
    MARKETING = "MARKETING"
    SALES = "SALES"
    DESIGN = "DESIGN"
    ENGINEERING = "ENGINEERING"
    OPERATIONS = "OPERATIONS"
    HUMAN_RESOURCES = "HUMAN_RESOURCES"
    LEGAL = "LEGAL"
    CUSTOMER_SERVICE = "CUSTOMER_SERVICE"
    MANUFACTURING = "MANUFACTURING"
    CONSULTING = "CONSULTING"
    MEDIA = "MEDIA"
    GOVERNMENT = "GOVERNMENT"
    NON_PROFIT = "NON_PROFIT"
    AGRICULTURE = "AGRICULTURE"
    CONSTRUCTION = "CONSTRUCTION"
    HOSPITALITY = "HOSPITALITY"
    TRANSPORTATION = "TRANSPORTATION"
    RETAIL = "RETAIL"
    REAL_ESTATE = "REAL_ESTATE"
    TELECOMMUNICATIONS = "TELECOMMUNICATIONS"
    OTHER = "OTHER"


# ==================== Job ===================== #
class Job(Base):
    """
    Job posting owned by one employer.

    ``is_active`` must be false once ``deadline`` has passed, but that is
    enforced by the sweep on listing paths, not on every write.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )
    employer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    responsibilities: Mapped[list[str]] = mapped_column(
        JSON, default=list, nullable=False
    )
    benefits: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    location: Mapped[str | None] = mapped_column(String(255))
    category: Mapped[JobCategory] = mapped_column(
        SQLEnum(JobCategory, name="job_category"), nullable=False, index=True
    )
    experience_level: Mapped[ExperienceLevel | None] = mapped_column(
        SQLEnum(ExperienceLevel, name="experience_level")
    )
    job_type: Mapped[JobType] = mapped_column(
        SQLEnum(JobType, name="job_type"), default=JobType.FULL_TIME, nullable=False
    )
    salary_min: Mapped[float | None] = mapped_column(Float)
    salary_max: Mapped[float | None] = mapped_column(Float)
    is_remote: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    contact_phone: Mapped[str | None] = mapped_column(String(20))

    # Lifecycle
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, onupdate=now, nullable=False
    )

    # Relationships
    applications: Mapped[list["Application"]] = relationship(
        "Application", back_populates="job", lazy="raise", passive_deletes=True
    )
    attachments: Mapped[list["Attachment"]] = relationship(
        "Attachment",
        primaryjoin="Job.id == Attachment.job_id",
        cascade="all, delete-orphan",
        lazy="selectin",
        passive_deletes=True,
        order_by="Attachment.id",
    )

    __table_args__ = (
        Index("idx_jobs_active_deadline", "is_active", "deadline"),
        Index("idx_jobs_employer_created", "employer_id", "created_at"),
    )
