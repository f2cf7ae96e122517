"""
Application state machine.

Creation is gated on job eligibility and the one-application-per-job rule;
status changes go through ``check_status_transition`` so a stricter policy
can be dropped in without touching callers.
"""

from datetime import datetime
from typing import Optional, Sequence, Union
import logging

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import AttachmentCreate, PaginationParams
from core.exceptions import (
    DuplicateApplicationError,
    JobClosedError,
    NotFoundError,
    StaleVersionError,
    ValidationError,
)
from core.middleware.authentication import Identity
from core.utils.datetime import is_past, now as utc_now
from database.models import Application, ApplicationStatus, Attachment, Job

logger = logging.getLogger(__name__)

# Every status may currently move to every other one; tighten per status here
ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    status: frozenset(ApplicationStatus) for status in ApplicationStatus
}


def parse_application_status(value: Union[str, ApplicationStatus]) -> ApplicationStatus:
    """
    Parse a requested status.

    Raises:
        ValidationError: If the value is not one of the five statuses
    """
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationError(
            f"Invalid status value: {value}. Allowed values: {allowed}"
        )


def check_status_transition(
    current: ApplicationStatus, new: Union[str, ApplicationStatus]
) -> ApplicationStatus:
    """
    The single gate for application status changes.

    Returns:
        The parsed target status

    Raises:
        ValidationError: If the target is unknown or not reachable from ``current``
    """
    target = parse_application_status(new)
    if target not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise ValidationError(
            f"Cannot change application status from {current.value} to {target.value}"
        )
    return target


def participant_filter(identity: Identity):
    """Row filter matching applications the identity takes part in."""
    if identity.is_employer:
        return Job.employer_id == identity.id
    if identity.is_job_seeker:
        return Application.job_seeker_id == identity.id
    return None


class ApplicationStateMachine:
    """Applications: creation, status transitions and ownership-scoped queries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        job_id: int,
        job_seeker_id: str,
        cover_letter: Optional[str] = None,
        attachments: Sequence[AttachmentCreate] = (),
        now: Optional[datetime] = None,
    ) -> Application:
        """
        Apply to a job.

        Raises:
            NotFoundError: The job does not exist
            JobClosedError: The job is closed or its deadline has passed
            DuplicateApplicationError: The job seeker already applied
        """
        now = now or utc_now()

        job = await self.session.get(Job, job_id, populate_existing=True)
        if job is None:
            raise NotFoundError("Job not found")

        # Same outcome as sweeping first: a passed deadline closes the job
        if not job.is_active or (job.deadline is not None and is_past(job.deadline, now)):
            raise JobClosedError()

        existing = await self.session.execute(
            select(Application.id).where(
                Application.job_id == job_id,
                Application.job_seeker_id == job_seeker_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateApplicationError()

        application = Application(
            job=job,
            job_seeker_id=job_seeker_id,
            cover_letter=cover_letter,
            status=ApplicationStatus.PENDING,
            applied_at=now,
            attachments=[
                Attachment(
                    url=item.url,
                    filename=item.filename,
                    file_type=item.file_type,
                    mime_type=item.mime_type,
                    uploaded_by=job_seeker_id,
                )
                for item in attachments
            ],
        )
        self.session.add(application)
        try:
            await self.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent apply for the same pair
            await self.session.rollback()
            raise DuplicateApplicationError()
        await self.session.refresh(application)

        logger.info(
            f"Application {application.id} created for job {job_id} "
            f"by job seeker {job_seeker_id}"
        )
        return application

    async def update_status(
        self,
        application_id: int,
        employer_id: str,
        new_status: Union[str, ApplicationStatus],
        expected_version: Optional[int] = None,
    ) -> Application:
        """
        Move an application to ``new_status`` on behalf of the job owner.

        Without ``expected_version`` the last committed write wins; with it,
        a concurrent change since the caller's read raises StaleVersionError.
        """
        target = parse_application_status(new_status)

        result = await self.session.execute(
            select(Application)
            .join(Job, Application.job_id == Job.id)
            .where(Application.id == application_id, Job.employer_id == employer_id)
            .with_for_update(of=Application)
            .execution_options(populate_existing=True)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("Application not found")

        if expected_version is not None and application.version != expected_version:
            raise StaleVersionError(
                f"Application was modified (version {application.version}, "
                f"expected {expected_version})"
            )

        previous = application.status
        application.status = check_status_transition(previous, target)
        application.version += 1

        await self.session.commit()
        await self.session.refresh(application)

        logger.info(
            f"Application {application.id} status {previous.value} -> "
            f"{application.status.value} by employer {employer_id}"
        )
        return application

    # ==================== Queries ===================== #

    async def _paginate(
        self,
        conditions: list,
        pagination: PaginationParams,
        status: Optional[ApplicationStatus] = None,
    ) -> tuple[list[Application], int]:
        if status is not None:
            conditions = [*conditions, Application.status == status]

        total_result = await self.session.execute(
            select(func.count(Application.id))
            .join(Job, Application.job_id == Job.id)
            .where(*conditions)
        )
        total = total_result.scalar() or 0

        result = await self.session.execute(
            select(Application)
            .join(Job, Application.job_id == Job.id)
            .where(*conditions)
            .order_by(Application.applied_at.desc(), Application.id.desc())
            .limit(pagination.page_size)
            .offset(pagination.offset)
        )
        return list(result.scalars().all()), total

    async def list_for_job_seeker(
        self,
        job_seeker_id: str,
        pagination: PaginationParams,
        status: Optional[ApplicationStatus] = None,
    ) -> tuple[list[Application], int]:
        """The job seeker's own applications."""
        return await self._paginate(
            [Application.job_seeker_id == job_seeker_id], pagination, status
        )

    async def list_for_job(
        self,
        job_id: int,
        employer_id: str,
        pagination: PaginationParams,
        status: Optional[ApplicationStatus] = None,
    ) -> tuple[list[Application], int]:
        """Applications to one job; 404 unless the employer owns it."""
        owned = await self.session.execute(
            select(Job.id).where(Job.id == job_id, Job.employer_id == employer_id)
        )
        if owned.scalar_one_or_none() is None:
            raise NotFoundError("Job not found")
        return await self._paginate([Application.job_id == job_id], pagination, status)

    async def list_for_employer(
        self,
        employer_id: str,
        pagination: PaginationParams,
        status: Optional[ApplicationStatus] = None,
    ) -> tuple[list[Application], int]:
        """Applications across every job the employer owns."""
        return await self._paginate([Job.employer_id == employer_id], pagination, status)

    async def get_for_participant(
        self, application_id: int, identity: Identity
    ) -> Application:
        """
        Application visible to the applicant or the job's owner.

        Anyone else gets NotFoundError, the same as for a missing row.
        """
        condition = participant_filter(identity)
        if condition is None:
            raise NotFoundError("Application not found")

        result = await self.session.execute(
            select(Application)
            .join(Job, Application.job_id == Job.id)
            .where(Application.id == application_id, condition)
        )
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("Application not found")
        return application
