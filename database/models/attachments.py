"""
Attachment references.

URLs come from the external upload service; they are stored and returned
verbatim, never dereferenced here.
"""

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, ForeignKey, DateTime, Enum as SQLEnum
from database.engine import Base, IdType
from core.utils.datetime import now
from datetime import datetime
from enum import Enum as PyEnum


class AttachmentType(str, PyEnum):
    IMAGE = "IMAGE"
    DOCUMENT = "DOCUMENT"
    RESUME = "RESUME"
    COVER_LETTER = "COVER_LETTER"
    PORTFOLIO = "PORTFOLIO"
    CERTIFICATE = "CERTIFICATE"
    OTHER = "OTHER"


class Attachment(Base):
    __tablename__ = "attachments"

    id: Mapped[int] = mapped_column(
        IdType, primary_key=True, nullable=False, autoincrement=True
    )
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_type: Mapped[AttachmentType] = mapped_column(
        SQLEnum(AttachmentType, name="attachment_type"),
        default=AttachmentType.OTHER,
        nullable=False,
    )
    mime_type: Mapped[str | None] = mapped_column(String(100))
    uploaded_by: Mapped[str | None] = mapped_column(String(64))

    job_id: Mapped[int | None] = mapped_column(
        IdType, ForeignKey("jobs.id", ondelete="CASCADE"), index=True
    )
    application_id: Mapped[int | None] = mapped_column(
        IdType, ForeignKey("applications.id", ondelete="CASCADE"), index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now, nullable=False
    )
