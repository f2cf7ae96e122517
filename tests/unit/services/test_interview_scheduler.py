"""
Tests for the interview scheduler.

Tests:
- Additive scheduling behind the ownership chain
- Partial updates with optional version checks
- Upcoming interview reminders for job seekers
"""

import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select

from api.schemas.interviews import InterviewCreate, InterviewUpdate
from api.services.interviews import InterviewScheduler
from core.exceptions import NotFoundError, StaleVersionError, ValidationError
from core.middleware.authentication import Identity, Role
from database.models import Interview, InterviewStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def details(**overrides) -> InterviewCreate:
    values = {
        "scheduled_date": utcnow() + timedelta(days=5),
        "scheduled_time": "14:30",
        "is_virtual": True,
        "meeting_link": "https://meet.example.com/abc",
    }
    values.update(overrides)
    return InterviewCreate(**values)


class TestSchedule:
    """Test scheduling interviews."""

    @pytest.mark.asyncio
    async def test_schedule_by_owner(self, session, make_job, make_application):
        job = await make_job()
        application = await make_application(job)

        interview = await InterviewScheduler(session).schedule(
            application.id, "employer-1", details()
        )

        assert interview.status == InterviewStatus.SCHEDULED
        assert interview.created_by == "employer-1"
        assert interview.scheduled_time == "14:30"
        assert interview.version == 1

    @pytest.mark.asyncio
    async def test_scheduling_twice_keeps_both(self, session, make_job, make_application):
        """A second interview is added; the first stays as it was."""
        job = await make_job()
        application = await make_application(job)
        scheduler = InterviewScheduler(session)

        first = await scheduler.schedule(
            application.id, "employer-1", details(scheduled_time="09:00")
        )
        second = await scheduler.schedule(
            application.id, "employer-1", details(scheduled_time="16:00")
        )

        interviews = await scheduler.list_for_application(
            application.id, Identity(id="employer-1", role=Role.EMPLOYER)
        )
        assert [i.id for i in interviews] == [first.id, second.id]
        assert interviews[0].scheduled_time == "09:00"
        assert interviews[0].status == InterviewStatus.SCHEDULED

    @pytest.mark.asyncio
    async def test_non_owner_cannot_schedule(self, session, make_job, make_application):
        job = await make_job()
        application = await make_application(job)

        with pytest.raises(NotFoundError):
            await InterviewScheduler(session).schedule(
                application.id, "employer-2", details()
            )

        rows = await session.execute(select(Interview.id))
        assert rows.scalars().all() == []

    @pytest.mark.asyncio
    async def test_missing_application(self, session):
        with pytest.raises(NotFoundError):
            await InterviewScheduler(session).schedule(999, "employer-1", details())

    @pytest.mark.asyncio
    async def test_past_dates_allowed_by_default(self, session, make_job, make_application):
        job = await make_job()
        application = await make_application(job)

        interview = await InterviewScheduler(session, reject_past_dates=False).schedule(
            application.id,
            "employer-1",
            details(scheduled_date=utcnow() - timedelta(days=1)),
        )

        assert interview.id is not None

    @pytest.mark.asyncio
    async def test_past_dates_rejected_when_enabled(
        self, session, make_job, make_application
    ):
        job = await make_job()
        application = await make_application(job)

        with pytest.raises(ValidationError):
            await InterviewScheduler(session, reject_past_dates=True).schedule(
                application.id,
                "employer-1",
                details(scheduled_date=utcnow() - timedelta(days=1)),
            )


class TestUpdateInterview:
    """Test partial interview edits."""

    @pytest.mark.asyncio
    async def test_only_supplied_fields_change(
        self, session, make_job, make_application, make_interview
    ):
        job = await make_job()
        application = await make_application(job)
        interview = await make_interview(application, location="Office 4")

        updated = await InterviewScheduler(session).update(
            interview.id, "employer-1", InterviewUpdate(status="CONFIRMED")
        )

        assert updated.status == InterviewStatus.CONFIRMED
        assert updated.location == "Office 4"
        assert updated.scheduled_time == "10:00"
        assert updated.version == 2

    @pytest.mark.asyncio
    async def test_explicit_null_clears_optional_text(
        self, session, make_job, make_application, make_interview
    ):
        job = await make_job()
        application = await make_application(job)
        interview = await make_interview(application, description="Bring a laptop")

        updated = await InterviewScheduler(session).update(
            interview.id, "employer-1", InterviewUpdate(description=None)
        )

        assert updated.description is None

    def test_null_for_required_fields_is_rejected(self):
        for field in ("scheduled_date", "scheduled_time", "status", "is_virtual"):
            with pytest.raises(PydanticValidationError):
                InterviewUpdate(**{field: None})

    @pytest.mark.asyncio
    async def test_non_owner_gets_not_found(
        self, session, make_job, make_application, make_interview
    ):
        job = await make_job()
        application = await make_application(job)
        interview = await make_interview(application)

        with pytest.raises(NotFoundError):
            await InterviewScheduler(session).update(
                interview.id, "employer-2", InterviewUpdate(status="CANCELLED")
            )

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(
        self, session, make_job, make_application, make_interview
    ):
        job = await make_job()
        application = await make_application(job)
        interview = await make_interview(application)
        scheduler = InterviewScheduler(session)

        await scheduler.update(
            interview.id, "employer-1", InterviewUpdate(scheduled_time="11:00", expected_version=1)
        )
        with pytest.raises(StaleVersionError):
            await scheduler.update(
                interview.id,
                "employer-1",
                InterviewUpdate(scheduled_time="12:00", expected_version=1),
            )

        await session.refresh(interview)
        assert interview.scheduled_time == "11:00"


class TestDeleteInterview:
    """Test interview deletion."""

    @pytest.mark.asyncio
    async def test_owner_deletes(self, session, make_job, make_application, make_interview):
        job = await make_job()
        application = await make_application(job)
        interview = await make_interview(application)
        keep = await make_interview(application)

        await InterviewScheduler(session).delete(interview.id, "employer-1")

        rows = await session.execute(select(Interview.id))
        assert rows.scalars().all() == [keep.id]

    @pytest.mark.asyncio
    async def test_non_owner_cannot_delete(
        self, session, make_job, make_application, make_interview
    ):
        job = await make_job()
        application = await make_application(job)
        interview = await make_interview(application)

        with pytest.raises(NotFoundError):
            await InterviewScheduler(session).delete(interview.id, "employer-2")


class TestParticipantReads:
    """Test reads scoped to the applicant and the job owner."""

    @pytest.mark.asyncio
    async def test_get_for_participant(
        self, session, make_job, make_application, make_interview
    ):
        job = await make_job()
        application = await make_application(job)
        interview = await make_interview(application)
        scheduler = InterviewScheduler(session)

        for identity in (
            Identity(id="seeker-1", role=Role.JOB_SEEKER),
            Identity(id="employer-1", role=Role.EMPLOYER),
        ):
            found = await scheduler.get_for_participant(interview.id, identity)
            assert found.id == interview.id

        for outsider in (
            Identity(id="seeker-2", role=Role.JOB_SEEKER),
            Identity(id="employer-2", role=Role.EMPLOYER),
            Identity(id="admin-1", role=Role.ADMIN),
        ):
            with pytest.raises(NotFoundError):
                await scheduler.get_for_participant(interview.id, outsider)

    @pytest.mark.asyncio
    async def test_list_for_application_hidden_from_outsiders(
        self, session, make_job, make_application, make_interview
    ):
        job = await make_job()
        application = await make_application(job)
        await make_interview(application)

        with pytest.raises(NotFoundError):
            await InterviewScheduler(session).list_for_application(
                application.id, Identity(id="seeker-2", role=Role.JOB_SEEKER)
            )


class TestUpcoming:
    """Test the job seeker's upcoming interview list."""

    @pytest.mark.asyncio
    async def test_filters_and_orders(
        self, session, make_job, make_application, make_interview
    ):
        now = utcnow()
        first_job = await make_job(title="Platform Engineer")
        second_job = await make_job(title="Data Engineer")
        first = await make_application(first_job)
        second = await make_application(second_job)
        foreign = await make_application(first_job, "seeker-2")

        later = await make_interview(first, scheduled_date=now + timedelta(days=10))
        sooner = await make_interview(
            second,
            scheduled_date=now + timedelta(days=1),
            status=InterviewStatus.CONFIRMED,
        )
        await make_interview(first, scheduled_date=now - timedelta(days=1))
        await make_interview(
            second, scheduled_date=now + timedelta(days=2), status=InterviewStatus.CANCELLED
        )
        await make_interview(
            second, scheduled_date=now + timedelta(days=3), status=InterviewStatus.COMPLETED
        )
        await make_interview(foreign, scheduled_date=now + timedelta(days=4))

        upcoming = await InterviewScheduler(session).list_upcoming("seeker-1", now)

        assert [row["interview"].id for row in upcoming] == [sooner.id, later.id]
        assert upcoming[0]["job_title"] == "Data Engineer"
        assert upcoming[1]["job_id"] == first_job.id

    @pytest.mark.asyncio
    async def test_recomputed_on_each_call(
        self, session, make_job, make_application, make_interview
    ):
        now = utcnow()
        job = await make_job()
        application = await make_application(job)
        await make_interview(application, scheduled_date=now + timedelta(hours=1))
        scheduler = InterviewScheduler(session)

        assert len(await scheduler.list_upcoming("seeker-1", now)) == 1
        assert await scheduler.list_upcoming("seeker-1", now + timedelta(hours=2)) == []
