"""
Job lifecycle service.

Owns the ACTIVE/CLOSED state of job postings. Expiry is enforced lazily:
listing paths run ``safe_sweep`` before filtering, and single-job reads
report a past-deadline job as CLOSED even before the sweep has flipped it.
"""

from datetime import datetime
from typing import Optional
import logging

from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import PaginationParams
from api.schemas.jobs import JobCreate, JobFilters, JobUpdate, REMOTE_LOCATION
from core.exceptions import NotFoundError, ValidationError
from core.utils.datetime import now as utc_now
from database.models import (
    Application,
    Attachment,
    AttachmentType,
    Interview,
    Job,
)

logger = logging.getLogger(__name__)

JOB_IMAGE_FILENAME = "hiring-flyer.jpg"
JOB_IMAGE_MIME_TYPE = "image/jpeg"


def build_job_filters(filters: JobFilters) -> list:
    """
    Turn the typed listing filters into SQL predicates.

    This is the only place listing filters are interpreted.
    """
    predicates = []
    if filters.category is not None:
        predicates.append(Job.category == filters.category)
    if filters.experience_level is not None:
        predicates.append(Job.experience_level == filters.experience_level)
    if filters.job_type is not None:
        predicates.append(Job.job_type == filters.job_type)
    if filters.location:
        predicates.append(Job.location.ilike(f"%{filters.location}%"))
    if filters.salary_min is not None:
        predicates.append(Job.salary_min >= filters.salary_min)
    if filters.salary_max is not None:
        predicates.append(Job.salary_max <= filters.salary_max)
    if filters.search:
        pattern = f"%{filters.search}%"
        predicates.append(
            or_(Job.title.ilike(pattern), Job.description.ilike(pattern))
        )
    return predicates


def _job_image(url: str, employer_id: str) -> Attachment:
    return Attachment(
        url=url,
        filename=JOB_IMAGE_FILENAME,
        file_type=AttachmentType.IMAGE,
        mime_type=JOB_IMAGE_MIME_TYPE,
        uploaded_by=employer_id,
    )


class JobLifecycleManager:
    """Job postings: creation, edits, open/close toggles, expiry and deletion."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== Expiry ===================== #

    async def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """
        Close every active job whose deadline is strictly in the past.

        A single conditional UPDATE, so concurrent sweeps cannot lose each
        other's writes and a repeated sweep changes nothing.

        Returns:
            Number of jobs closed by this call
        """
        now = now or utc_now()
        stmt = (
            update(Job)
            .where(
                Job.deadline.is_not(None),
                Job.deadline < now,
                Job.is_active.is_(True),
            )
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()

        closed = result.rowcount or 0
        if closed:
            logger.info(f"Expiry sweep closed {closed} job(s)")
        return closed

    async def safe_sweep(self, now: Optional[datetime] = None) -> int:
        """Run the sweep without letting a failure break the caller's read."""
        try:
            return await self.sweep_expired(now)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.warning(
                "Expiry sweep failed; listing with stored active flags",
                exc_info=True,
            )
            return 0

    # ==================== Queries ===================== #

    async def list_jobs(
        self,
        filters: JobFilters,
        pagination: PaginationParams,
    ) -> tuple[list[Job], int]:
        """Active jobs matching ``filters``, newest first."""
        await self.safe_sweep()

        conditions = [Job.is_active.is_(True), *build_job_filters(filters)]

        total_result = await self.session.execute(
            select(func.count()).select_from(Job).where(*conditions)
        )
        total = total_result.scalar() or 0

        result = await self.session.execute(
            select(Job)
            .where(*conditions)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .limit(pagination.page_size)
            .offset(pagination.offset)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total

    async def list_my_jobs(
        self,
        employer_id: str,
        pagination: PaginationParams,
    ) -> tuple[list[tuple[Job, int]], int]:
        """
        The employer's own jobs with their application counts, newest first.

        Returns:
            ``[(job, applications_count), ...]`` and the total job count
        """
        await self.safe_sweep()

        total_result = await self.session.execute(
            select(func.count()).select_from(Job).where(Job.employer_id == employer_id)
        )
        total = total_result.scalar() or 0

        counts = (
            select(
                Application.job_id.label("job_id"),
                func.count(Application.id).label("applications_count"),
            )
            .group_by(Application.job_id)
            .subquery()
        )
        result = await self.session.execute(
            select(Job, func.coalesce(counts.c.applications_count, 0))
            .outerjoin(counts, counts.c.job_id == Job.id)
            .where(Job.employer_id == employer_id)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .limit(pagination.page_size)
            .offset(pagination.offset)
            .execution_options(populate_existing=True)
        )
        return [(job, count) for job, count in result.all()], total

    async def get_job(self, job_id: int) -> Job:
        """Public single-job read; the effective status is derived by the caller."""
        job = await self.session.get(Job, job_id, populate_existing=True)
        if job is None:
            raise NotFoundError("Job not found")
        return job

    async def get_owned_job(
        self, job_id: int, employer_id: str, for_update: bool = False
    ) -> Job:
        """Job owned by ``employer_id``; someone else's job is reported missing."""
        stmt = (
            select(Job)
            .where(Job.id == job_id, Job.employer_id == employer_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        job = result.scalar_one_or_none()
        if job is None:
            raise NotFoundError("Job not found")
        return job

    # ==================== Mutations ===================== #

    async def create_job(self, employer_id: str, payload: JobCreate) -> Job:
        job = Job(
            employer_id=employer_id,
            title=payload.title,
            description=payload.description,
            requirements=payload.requirements,
            responsibilities=payload.responsibilities,
            benefits=payload.benefits,
            location=REMOTE_LOCATION if payload.is_remote else payload.location,
            category=payload.category,
            experience_level=payload.experience_level,
            job_type=payload.job_type,
            salary_min=payload.salary_min,
            salary_max=payload.salary_max,
            is_remote=payload.is_remote,
            contact_phone=payload.formatted_contact_phone(),
            deadline=payload.deadline,
            is_active=True,
            # Only one advertisement image per job
            attachments=[_job_image(payload.images[0], employer_id)]
            if payload.images
            else [],
        )

        self.session.add(job)
        await self.session.commit()
        await self.session.refresh(job)

        logger.info(f"Job {job.id} created by employer {employer_id}")
        return job

    async def update_job(
        self, job_id: int, employer_id: str, payload: JobUpdate
    ) -> Job:
        """
        Apply a partial edit from the owning employer.

        Remote/location and salary rules are checked against the merged
        record, not just the supplied fields.
        """
        job = await self.get_owned_job(job_id, employer_id, for_update=True)
        changes = payload.model_dump(
            exclude_unset=True,
            exclude={"images", "is_active", "contact_phone", "contact_country_code"},
        )

        is_remote = changes.get("is_remote", job.is_remote)
        location = changes.get("location", job.location)
        if is_remote:
            changes["location"] = REMOTE_LOCATION
        elif not location or (location == REMOTE_LOCATION and job.is_remote):
            raise ValidationError("Location is required for non-remote jobs")

        salary_min = changes.get("salary_min", job.salary_min)
        salary_max = changes.get("salary_max", job.salary_max)
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            raise ValidationError(
                "Minimum salary cannot be greater than maximum salary"
            )

        for field, value in changes.items():
            setattr(job, field, value)

        if "contact_phone" in payload.model_fields_set:
            job.contact_phone = payload.formatted_contact_phone()

        if payload.images is not None:
            kept = [a for a in job.attachments if a.file_type != AttachmentType.IMAGE]
            if payload.images:
                kept.append(_job_image(payload.images[0], employer_id))
            job.attachments = kept

        if payload.is_active is not None:
            self._apply_status(job, payload.is_active)

        await self.session.commit()
        await self.session.refresh(job)

        logger.info(
            f"Job {job.id} updated by employer {employer_id}: "
            f"{sorted(payload.model_fields_set)}"
        )
        return job

    async def set_status(self, job_id: int, employer_id: str, active: bool) -> Job:
        """
        Explicit open/close toggle by the owner.

        Reopening a job whose deadline has passed is allowed; the next sweep
        closes it again unless the deadline is moved.
        """
        job = await self.get_owned_job(job_id, employer_id, for_update=True)
        self._apply_status(job, active)
        await self.session.commit()
        await self.session.refresh(job)
        return job

    def _apply_status(self, job: Job, active: bool) -> None:
        if job.is_active == active:
            return
        job.is_active = active
        logger.info(
            f"Job {job.id} {'reopened' if active else 'closed'} by employer "
            f"{job.employer_id}"
        )

    async def delete_job(self, job_id: int, employer_id: str) -> None:
        """
        Delete a job and everything hanging off it in one transaction.

        Children are removed explicitly so the cascade does not depend on
        the database enforcing ON DELETE.
        """
        await self.get_owned_job(job_id, employer_id, for_update=True)

        application_ids = select(Application.id).where(Application.job_id == job_id)
        try:
            interviews = await self.session.execute(
                delete(Interview)
                .where(Interview.application_id.in_(application_ids))
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(Attachment)
                .where(
                    or_(
                        Attachment.job_id == job_id,
                        Attachment.application_id.in_(application_ids),
                    )
                )
                .execution_options(synchronize_session=False)
            )
            applications = await self.session.execute(
                delete(Application)
                .where(Application.job_id == job_id)
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(Job)
                .where(Job.id == job_id)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

        # Drop the stale instances so later reads in this session hit the database
        self.session.expunge_all()

        logger.info(
            f"Job {job_id} deleted by employer {employer_id} with "
            f"{applications.rowcount or 0} application(s) and "
            f"{interviews.rowcount or 0} interview(s)"
        )
