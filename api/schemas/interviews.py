"""Interview API schemas."""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.utils.datetime import ensure_utc
from database.models import InterviewStatus

TIME_OF_DAY = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


class _InterviewFieldRules(BaseModel):
    @field_validator("scheduled_time", mode="before", check_fields=False)
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        value = str(v).strip()
        if not TIME_OF_DAY.match(value):
            raise ValueError("Time must be in HH:MM format")
        return value

    @field_validator("meeting_link", mode="before", check_fields=False)
    @classmethod
    def validate_meeting_link(cls, v: Optional[str]) -> Optional[str]:
        if v is None or str(v).strip() == "":
            return None
        link = str(v).strip()
        if not link.lower().startswith(("http://", "https://")):
            raise ValueError("Valid meeting link required")
        return link

    @field_validator("description", "location", mode="before", check_fields=False)
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("scheduled_date", check_fields=False)
    @classmethod
    def normalise_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class InterviewCreate(_InterviewFieldRules):
    """Schema for scheduling an interview."""

    scheduled_date: datetime
    scheduled_time: str
    is_virtual: bool = False
    meeting_link: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class InterviewUpdate(_InterviewFieldRules):
    """
    Partial interview update.

    Omitted fields are left unchanged; an explicit null is only accepted for
    the optional text fields.
    """

    scheduled_date: Optional[datetime] = None
    scheduled_time: Optional[str] = None
    is_virtual: Optional[bool] = None
    meeting_link: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[InterviewStatus] = None
    expected_version: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def reject_null_required(self) -> "InterviewUpdate":
        for name in ("scheduled_date", "scheduled_time", "status", "is_virtual"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields supplied by the caller, excluding the version token."""
        return self.model_dump(exclude_unset=True, exclude={"expected_version"})


class InterviewResponse(BaseModel):
    """Schema for interview response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    scheduled_date: datetime
    scheduled_time: str
    is_virtual: bool
    meeting_link: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    status: InterviewStatus
    created_by: str
    version: int
    created_at: datetime
    updated_at: datetime

    @field_validator("scheduled_date")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class UpcomingInterviewResponse(InterviewResponse):
    """Interview plus the job it belongs to, for the job seeker's reminders."""

    job_id: int
    job_title: str
