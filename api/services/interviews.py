"""
Interview scheduler.

Interviews hang off applications and are managed only by the employer at
the end of the ownership chain (interview -> application -> job ->
employer). Scheduling is additive: a new interview never replaces an
existing one.
"""

from datetime import datetime
from typing import Any, Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.interviews import InterviewCreate, InterviewUpdate
from api.services.applications import ApplicationStateMachine, participant_filter
from core.config import settings
from core.exceptions import NotFoundError, StaleVersionError, ValidationError
from core.middleware.authentication import Identity
from core.utils.datetime import is_past, now as utc_now
from database.models import (
    Application,
    Interview,
    InterviewStatus,
    Job,
    UPCOMING_INTERVIEW_STATUSES,
)

logger = logging.getLogger(__name__)


class InterviewScheduler:
    """Interviews: scheduling, partial edits, deletion and upcoming reminders."""

    def __init__(
        self,
        session: AsyncSession,
        reject_past_dates: Optional[bool] = None,
    ):
        self.session = session
        self.reject_past_dates = (
            settings.interview_reject_past_dates
            if reject_past_dates is None
            else reject_past_dates
        )

    def _check_date(self, scheduled_date: datetime, now: Optional[datetime]) -> None:
        if self.reject_past_dates and is_past(scheduled_date, now):
            raise ValidationError("Interview date cannot be in the past")

    async def _owned_application(self, application_id: int, employer_id: str) -> Application:
        result = await self.session.execute(
            select(Application)
            .join(Job, Application.job_id == Job.id)
            .where(Application.id == application_id, Job.employer_id == employer_id)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def _owned_interview(
        self, interview_id: int, employer_id: str, for_update: bool = False
    ) -> Interview:
        stmt = (
            select(Interview)
            .join(Application, Interview.application_id == Application.id)
            .join(Job, Application.job_id == Job.id)
            .where(Interview.id == interview_id, Job.employer_id == employer_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update(of=Interview)
        result = await self.session.execute(stmt)
        interview = result.scalar_one_or_none()
        if interview is None:
            raise NotFoundError("Interview not found")
        return interview

    async def schedule(
        self,
        application_id: int,
        employer_id: str,
        details: InterviewCreate,
        now: Optional[datetime] = None,
    ) -> Interview:
        """Add an interview to an application owned (via its job) by the employer."""
        application = await self._owned_application(application_id, employer_id)
        self._check_date(details.scheduled_date, now)

        interview = Interview(
            application_id=application.id,
            scheduled_date=details.scheduled_date,
            scheduled_time=details.scheduled_time,
            is_virtual=details.is_virtual,
            meeting_link=details.meeting_link,
            location=details.location,
            description=details.description,
            status=InterviewStatus.SCHEDULED,
            created_by=employer_id,
        )
        self.session.add(interview)
        await self.session.commit()
        await self.session.refresh(interview)

        logger.info(
            f"Interview {interview.id} scheduled for application {application_id} "
            f"by employer {employer_id}"
        )
        return interview

    async def list_for_application(
        self, application_id: int, identity: Identity
    ) -> list[Interview]:
        """Interviews of one application in creation order, for its participants."""
        await ApplicationStateMachine(self.session).get_for_participant(
            application_id, identity
        )
        result = await self.session.execute(
            select(Interview)
            .where(Interview.application_id == application_id)
            .order_by(Interview.created_at.asc(), Interview.id.asc())
        )
        return list(result.scalars().all())

    async def get_for_participant(
        self, interview_id: int, identity: Identity
    ) -> Interview:
        condition = participant_filter(identity)
        if condition is None:
            raise NotFoundError("Interview not found")

        result = await self.session.execute(
            select(Interview)
            .join(Application, Interview.application_id == Application.id)
            .join(Job, Application.job_id == Job.id)
            .where(Interview.id == interview_id, condition)
        )
        interview = result.scalar_one_or_none()
        if interview is None:
            raise NotFoundError("Interview not found")
        return interview

    async def update(
        self,
        interview_id: int,
        employer_id: str,
        changes: InterviewUpdate,
        now: Optional[datetime] = None,
    ) -> Interview:
        """
        Apply only the fields the caller supplied.

        Raises:
            NotFoundError: Missing interview, or not owned by the employer
            StaleVersionError: ``expected_version`` no longer matches
        """
        interview = await self._owned_interview(interview_id, employer_id, for_update=True)

        if (
            changes.expected_version is not None
            and interview.version != changes.expected_version
        ):
            raise StaleVersionError(
                f"Interview was modified (version {interview.version}, "
                f"expected {changes.expected_version})"
            )

        fields = changes.changes()
        if "scheduled_date" in fields:
            self._check_date(fields["scheduled_date"], now)

        for field, value in fields.items():
            setattr(interview, field, value)
        interview.version += 1

        await self.session.commit()
        await self.session.refresh(interview)

        logger.info(
            f"Interview {interview.id} updated by employer {employer_id}: "
            f"{sorted(fields)}"
        )
        return interview

    async def delete(self, interview_id: int, employer_id: str) -> None:
        interview = await self._owned_interview(interview_id, employer_id, for_update=True)
        await self.session.delete(interview)
        await self.session.commit()
        logger.info(f"Interview {interview_id} deleted by employer {employer_id}")

    async def list_upcoming(
        self, job_seeker_id: str, now: Optional[datetime] = None
    ) -> list[dict[str, Any]]:
        """
        Future SCHEDULED/CONFIRMED interviews across the job seeker's
        applications, soonest first. Recomputed on every call.
        """
        now = now or utc_now()
        result = await self.session.execute(
            select(Interview, Job.id, Job.title)
            .join(Application, Interview.application_id == Application.id)
            .join(Job, Application.job_id == Job.id)
            .where(
                Application.job_seeker_id == job_seeker_id,
                Interview.scheduled_date > now,
                Interview.status.in_(list(UPCOMING_INTERVIEW_STATUSES)),
            )
            .order_by(Interview.scheduled_date.asc(), Interview.id.asc())
        )
        return [
            {"interview": interview, "job_id": job_id, "job_title": job_title}
            for interview, job_id, job_title in result.all()
        ]
