"""
Tests for request and response schemas.

Tests:
- Job payload validation
- Pagination envelope arithmetic
- Interview partial updates
"""

import pytest
from datetime import datetime, timedelta, timezone
from pydantic import ValidationError

from api.schemas.applications import ApplicationCreate
from api.schemas.common import PaginatedResponse, PaginationParams
from api.schemas.interviews import InterviewCreate, InterviewUpdate
from api.schemas.jobs import JobCreate, JobFilters, JobUpdate
from core.config import settings


class TestJobCreate:
    """Test job creation payloads."""

    def test_valid_payload(self, new_job_payload):
        job = JobCreate(**new_job_payload(title="  Data Engineer  "))

        assert job.title == "Data Engineer"
        assert job.is_remote is False
        assert job.images == []

    def test_location_required_unless_remote(self, new_job_payload):
        with pytest.raises(ValidationError):
            JobCreate(**new_job_payload(location=None))

        remote = JobCreate(**new_job_payload(location=None, is_remote=True))
        assert remote.location is None

    def test_salary_range(self, new_job_payload):
        with pytest.raises(ValidationError):
            JobCreate(**new_job_payload(salary_min=100, salary_max=50))

    def test_requirements_cannot_be_empty(self, new_job_payload):
        with pytest.raises(ValidationError):
            JobCreate(**new_job_payload(requirements=["  "]))

    def test_single_requirement_string_accepted(self, new_job_payload):
        job = JobCreate(**new_job_payload(requirements="Python"))
        assert job.requirements == ["Python"]

    def test_unknown_category(self, new_job_payload):
        with pytest.raises(ValidationError):
            JobCreate(**new_job_payload(category="ASTROLOGY"))

    @pytest.mark.parametrize(
        "phone,code,expected",
        [
            ("555-123-4567", "1", "+15551234567"),
            ("(030) 1234567", "+49", "+490301234567"),
            ("5551234567", None, "5551234567"),
        ],
    )
    def test_phone_formatting(self, new_job_payload, phone, code, expected):
        job = JobCreate(
            **new_job_payload(contact_phone=phone, contact_country_code=code)
        )
        assert job.formatted_contact_phone() == expected

    def test_invalid_phone(self, new_job_payload):
        with pytest.raises(ValidationError):
            JobCreate(**new_job_payload(contact_phone="12ab"))

    def test_naive_deadline_treated_as_utc(self, new_job_payload):
        job = JobCreate(**new_job_payload(deadline="2030-01-01T12:00:00"))
        assert job.deadline == datetime(2030, 1, 1, 12, tzinfo=timezone.utc)


class TestJobUpdate:
    """Test partial job updates."""

    def test_only_supplied_fields_are_set(self):
        update = JobUpdate(title="New title")
        assert update.model_fields_set == {"title"}

    @pytest.mark.parametrize("field", ["title", "category", "is_active", "is_remote"])
    def test_null_for_required_field_rejected(self, field):
        with pytest.raises(ValidationError):
            JobUpdate(**{field: None})

    def test_empty_requirements_rejected(self):
        with pytest.raises(ValidationError):
            JobUpdate(requirements=[])

    def test_null_deadline_allowed(self):
        update = JobUpdate(deadline=None)
        assert "deadline" in update.model_fields_set

    def test_country_code_without_phone_rejected(self):
        with pytest.raises(ValidationError):
            JobUpdate(contact_country_code="+44")

        update = JobUpdate(contact_phone="5551234567", contact_country_code="44")
        assert update.formatted_contact_phone() == "+445551234567"


class TestJobFilters:
    def test_blank_strings_ignored(self):
        filters = JobFilters(location="   ", search="")
        assert filters.location is None
        assert filters.search is None


class TestApplicationCreate:
    def test_attachment_limit(self):
        attachments = [
            {"url": f"https://cdn.example.com/{i}.pdf", "filename": f"{i}.pdf"}
            for i in range(11)
        ]
        with pytest.raises(ValidationError):
            ApplicationCreate(job_id=1, attachments=attachments)


class TestPagination:
    """Test pagination parameters and the list envelope."""

    def test_defaults(self):
        params = PaginationParams()
        assert params.page == 1
        assert params.page_size == settings.default_page_size
        assert params.offset == 0

    def test_offset(self):
        assert PaginationParams(page=3, page_size=20).offset == 40

    def test_page_size_bound(self):
        with pytest.raises(ValidationError):
            PaginationParams(page_size=settings.max_page_size + 1)

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError):
            PaginationParams(page=0)

    @pytest.mark.parametrize(
        "total,page,page_size,total_pages,has_next,has_prev",
        [
            (0, 1, 10, 0, False, False),
            (25, 1, 10, 3, True, False),
            (25, 2, 10, 3, True, True),
            (25, 3, 10, 3, False, True),
            (10, 1, 10, 1, False, False),
        ],
    )
    def test_envelope(self, total, page, page_size, total_pages, has_next, has_prev):
        response = PaginatedResponse[int].create(
            [], total, PaginationParams(page=page, page_size=page_size)
        )

        assert response.total_pages == total_pages
        assert response.has_next is has_next
        assert response.has_prev is has_prev


class TestInterviewSchemas:
    """Test interview payloads."""

    def test_create(self):
        interview = InterviewCreate(
            scheduled_date=datetime.now(timezone.utc) + timedelta(days=1),
            scheduled_time=" 9:30 ",
            meeting_link="https://meet.example.com/x",
        )
        assert interview.scheduled_time == "9:30"

    @pytest.mark.parametrize("value", ["25:00", "noon", "12:60"])
    def test_bad_time(self, value):
        with pytest.raises(ValidationError):
            InterviewCreate(
                scheduled_date=datetime.now(timezone.utc), scheduled_time=value
            )

    def test_bad_meeting_link(self):
        with pytest.raises(ValidationError):
            InterviewCreate(
                scheduled_date=datetime.now(timezone.utc),
                scheduled_time="10:00",
                meeting_link="ftp://example.com",
            )

    def test_changes_exclude_version_and_unset_fields(self):
        update = InterviewUpdate(location="Room 2", description=None, expected_version=4)
        assert update.changes() == {"location": "Room 2", "description": None}

    def test_empty_update(self):
        assert InterviewUpdate().changes() == {}
