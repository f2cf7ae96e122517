"""ORM models; importing this package registers every table on the metadata."""

from database.models.jobs import (
    Job,
    JobCategory,
    JobStatus,
    JobType,
    ExperienceLevel,
)
from database.models.applications import Application, ApplicationStatus
from database.models.interviews import (
    Interview,
    InterviewStatus,
    UPCOMING_INTERVIEW_STATUSES,
)
from database.models.attachments import Attachment, AttachmentType

__all__ = [
    "Job",
    "JobCategory",
    "JobStatus",
    "JobType",
    "ExperienceLevel",
    "Application",
    "ApplicationStatus",
    "Interview",
    "InterviewStatus",
    "UPCOMING_INTERVIEW_STATUSES",
    "Attachment",
    "AttachmentType",
]
