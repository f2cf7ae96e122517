"""Application API schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.schemas.common import AttachmentCreate, AttachmentResponse
from api.schemas.jobs import JobSummary
from database.models import ApplicationStatus


class ApplicationCreate(BaseModel):
    """Schema for applying to a job."""

    job_id: int = Field(..., ge=1)
    cover_letter: Optional[str] = Field(None, max_length=10000)
    attachments: list[AttachmentCreate] = Field(default_factory=list, max_length=10)

    @field_validator("cover_letter", mode="before")
    @classmethod
    def strip_cover_letter(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v


class ApplicationStatusUpdate(BaseModel):
    """
    Status change requested by the owning employer.

    ``status`` is parsed by the transition gate so that unknown values get
    the same error as disallowed ones. Send ``expected_version`` to fail
    with 409 instead of overwriting a change made since it was read.
    """

    status: str = Field(..., min_length=1)
    expected_version: Optional[int] = Field(None, ge=1)


class ApplicationResponse(BaseModel):
    """Schema for application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    job_seeker_id: str
    status: ApplicationStatus
    cover_letter: Optional[str] = None
    version: int
    applied_at: datetime
    updated_at: datetime
    job: Optional[JobSummary] = None
    attachments: list[AttachmentResponse] = Field(default_factory=list)
