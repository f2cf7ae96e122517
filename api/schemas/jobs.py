"""Job posting API schemas."""

import re
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from api.schemas.common import AttachmentResponse
from core.utils.datetime import ensure_utc, is_past
from database.models import (
    ExperienceLevel,
    Job,
    JobCategory,
    JobStatus,
    JobType,
)

PHONE_DIGITS = re.compile(r"^[0-9]{7,15}$")
COUNTRY_CODE = re.compile(r"^\+?[0-9]{1,4}$")
REMOTE_LOCATION = "Remote"


def _strip(v):
    if isinstance(v, str):
        return v.strip()
    return v


def _clean_list(v):
    """Accept a single string as a one-item list; drop blank entries."""
    if v is None:
        return v
    if isinstance(v, str):
        v = [v]
    if isinstance(v, list):
        return [item.strip() for item in v if isinstance(item, str) and item.strip()]
    return v


class _JobFieldRules(BaseModel):
    """Validators shared by create and partial update payloads."""

    @field_validator("title", "description", "location", mode="before", check_fields=False)
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator(
        "requirements", "responsibilities", "benefits", mode="before", check_fields=False
    )
    @classmethod
    def clean_lists(cls, v):
        return _clean_list(v)

    @field_validator("contact_phone", mode="before", check_fields=False)
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        phone = re.sub(r"[\s\-().]", "", str(v))
        if not phone:
            return None
        if not PHONE_DIGITS.match(phone):
            raise ValueError("Contact phone must be 7-15 digits")
        return phone

    @field_validator("contact_country_code", mode="before", check_fields=False)
    @classmethod
    def validate_country_code(cls, v: Optional[str]) -> Optional[str]:
        if v is None or str(v).strip() == "":
            return None
        code = str(v).strip()
        if not COUNTRY_CODE.match(code):
            raise ValueError("Country code must be 1-4 digits, optionally prefixed with +")
        return code if code.startswith("+") else f"+{code}"

    @field_validator("deadline", check_fields=False)
    @classmethod
    def normalise_deadline(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    def formatted_contact_phone(self) -> Optional[str]:
        """Phone number prefixed with the country code when one was given."""
        if not self.contact_phone:
            return None
        return f"{self.contact_country_code or ''}{self.contact_phone}"


class JobCreate(_JobFieldRules):
    """Schema for creating a job posting."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    requirements: list[str] = Field(..., min_length=1)
    responsibilities: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    location: Optional[str] = Field(None, max_length=255)
    category: JobCategory
    experience_level: Optional[ExperienceLevel] = None
    job_type: JobType
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    is_remote: bool = False
    deadline: Optional[datetime] = None
    contact_phone: Optional[str] = None
    contact_country_code: Optional[str] = None
    images: list[str] = Field(
        default_factory=list, description="Uploaded image URLs; only the first is kept"
    )

    @model_validator(mode="after")
    def check_location_and_salary(self) -> "JobCreate":
        if not self.is_remote and not self.location:
            raise ValueError("Location is required for non-remote jobs")
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("Minimum salary cannot be greater than maximum salary")
        return self


class JobUpdate(_JobFieldRules):
    """
    Partial update of a job posting.

    Only fields present in the request body are applied. ``is_active`` is the
    owner's explicit open/close toggle.
    """

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    requirements: Optional[list[str]] = None
    responsibilities: Optional[list[str]] = None
    benefits: Optional[list[str]] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[JobCategory] = None
    experience_level: Optional[ExperienceLevel] = None
    job_type: Optional[JobType] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    is_remote: Optional[bool] = None
    deadline: Optional[datetime] = None
    contact_phone: Optional[str] = None
    contact_country_code: Optional[str] = None
    is_active: Optional[bool] = None
    images: Optional[list[str]] = None

    @model_validator(mode="after")
    def reject_null_required(self) -> "JobUpdate":
        for name in (
            "title",
            "description",
            "responsibilities",
            "benefits",
            "category",
            "job_type",
            "is_remote",
            "is_active",
        ):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        if "requirements" in self.model_fields_set and not self.requirements:
            raise ValueError("Job requirements cannot be empty")
        if (
            "contact_country_code" in self.model_fields_set
            and "contact_phone" not in self.model_fields_set
        ):
            raise ValueError("contact_country_code must be sent with contact_phone")
        return self


class JobFilters(BaseModel):
    """Typed query structure for the public job listing."""

    category: Optional[JobCategory] = None
    experience_level: Optional[ExperienceLevel] = None
    job_type: Optional[JobType] = None
    location: Optional[str] = Field(None, max_length=255)
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    search: Optional[str] = Field(None, max_length=255)

    @field_validator("location", "search", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        v = _strip(v)
        return v or None


class JobResponse(BaseModel):
    """Schema for a job posting with its effective status."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    employer_id: str
    title: str
    description: str
    requirements: list[str]
    responsibilities: list[str]
    benefits: list[str]
    location: Optional[str] = None
    category: JobCategory
    experience_level: Optional[ExperienceLevel] = None
    job_type: JobType
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    is_remote: bool
    contact_phone: Optional[str] = None
    is_active: bool
    deadline: Optional[datetime] = None
    status: JobStatus
    is_expired: bool
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_job(
        cls, job: Job, reference: Optional[datetime] = None, **extra
    ) -> "JobResponse":
        """
        Build a response, reporting a past-deadline job as CLOSED.

        The stored flag may still be true until the next sweep runs.
        """
        is_expired = job.deadline is not None and is_past(job.deadline, reference)
        status = (
            JobStatus.ACTIVE if job.is_active and not is_expired else JobStatus.CLOSED
        )
        data = {
            field: getattr(job, field)
            for field in cls.model_fields
            if field not in ("status", "is_expired") and field not in extra
        }
        data["deadline"] = ensure_utc(job.deadline)
        data["attachments"] = [
            AttachmentResponse.model_validate(a) for a in job.attachments
        ]
        return cls(**data, status=status, is_expired=is_expired, **extra)


class MyJobResponse(JobResponse):
    """Employer view of an owned job."""

    applications_count: int = 0


class JobSummary(BaseModel):
    """Compact job embedded in application and interview responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    employer_id: str
    category: JobCategory
    job_type: JobType
    location: Optional[str] = None
    is_active: bool
