"""Shared fixtures and utilities for tests."""

import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-min-32-chars-long-for-security")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JSON_LOGS", "false")

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from core.config import settings
from database.engine import Base, build_session_factory, configure_engine, get_db
from database.models import (
    Application,
    ApplicationStatus,
    Interview,
    InterviewStatus,
    Job,
    JobCategory,
    JobType,
)

EMPLOYER_ID = "employer-1"
OTHER_EMPLOYER_ID = "employer-2"
JOB_SEEKER_ID = "seeker-1"
OTHER_JOB_SEEKER_ID = "seeker-2"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_token(
    user_id: str,
    role: str,
    secret: Optional[str] = None,
    expires_in: timedelta = timedelta(hours=1),
    **claims,
) -> str:
    """Sign a token the way the external identity provider would."""
    payload = {
        "sub": user_id,
        "role": role,
        "exp": utcnow() + expires_in,
        **claims,
    }
    return jwt.encode(
        payload, secret or settings.jwt_secret_key, algorithm=settings.jwt_algorithm
    )


def auth_headers(user_id: str, role: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


def job_payload(**overrides) -> dict:
    """Valid request body for POST /jobs."""
    payload = {
        "title": "Backend Engineer",
        "description": "Build and run the job board API.",
        "requirements": ["Python", "SQL"],
        "responsibilities": ["Ship features"],
        "benefits": ["Remote friendly"],
        "location": "Berlin",
        "category": "TECHNOLOGY",
        "experience_level": "MID_LEVEL",
        "job_type": "FULL_TIME",
        "salary_min": 60000,
        "salary_max": 90000,
    }
    payload.update(overrides)
    return payload


async def create_job(session, employer_id: str = EMPLOYER_ID, **overrides) -> Job:
    """Insert a job directly, bypassing the API."""
    values = {
        "employer_id": employer_id,
        "title": "Backend Engineer",
        "description": "Build and run the job board API.",
        "requirements": ["Python"],
        "location": "Berlin",
        "category": JobCategory.TECHNOLOGY,
        "job_type": JobType.FULL_TIME,
        "is_active": True,
    }
    values.update(overrides)
    job = Job(**values)
    session.add(job)
    await session.commit()
    await session.refresh(job)
    return job


async def create_application(
    session, job: Job, job_seeker_id: str = JOB_SEEKER_ID, **overrides
) -> Application:
    values = {
        "job_id": job.id,
        "job_seeker_id": job_seeker_id,
        "status": ApplicationStatus.PENDING,
    }
    values.update(overrides)
    application = Application(**values)
    session.add(application)
    await session.commit()
    await session.refresh(application)
    return application


async def create_interview(
    session, application: Application, **overrides
) -> Interview:
    values = {
        "application_id": application.id,
        "scheduled_date": utcnow() + timedelta(days=3),
        "scheduled_time": "10:00",
        "status": InterviewStatus.SCHEDULED,
        "created_by": EMPLOYER_ID,
    }
    values.update(overrides)
    interview = Interview(**values)
    session.add(interview)
    await session.commit()
    await session.refresh(interview)
    return interview


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with foreign keys enforced."""
    test_engine = configure_engine(
        create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as db_session:
        yield db_session


@pytest_asyncio.fixture
async def app(session_factory):
    """The API wired to the test database."""
    from api.main import app as fastapi_app

    async def _get_test_db():
        async with session_factory() as db_session:
            yield db_session

    fastapi_app.dependency_overrides[get_db] = _get_test_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client


@pytest.fixture
def employer_headers():
    return auth_headers(EMPLOYER_ID, "EMPLOYER")


@pytest.fixture
def other_employer_headers():
    return auth_headers(OTHER_EMPLOYER_ID, "EMPLOYER")


@pytest.fixture
def seeker_headers():
    return auth_headers(JOB_SEEKER_ID, "JOB_SEEKER")


@pytest.fixture
def other_seeker_headers():
    return auth_headers(OTHER_JOB_SEEKER_ID, "JOB_SEEKER")


@pytest.fixture
def token_factory():
    """``token_factory(user_id, role, **kwargs)`` -> signed JWT."""
    return make_token


@pytest.fixture
def new_job_payload():
    """``new_job_payload(**overrides)`` -> POST /jobs body."""
    return job_payload


@pytest.fixture
def make_job(session):
    async def _make_job(employer_id: str = EMPLOYER_ID, **overrides) -> Job:
        return await create_job(session, employer_id, **overrides)

    return _make_job


@pytest.fixture
def make_application(session):
    async def _make_application(
        job: Job, job_seeker_id: str = JOB_SEEKER_ID, **overrides
    ) -> Application:
        return await create_application(session, job, job_seeker_id, **overrides)

    return _make_application


@pytest.fixture
def make_interview(session):
    async def _make_interview(application: Application, **overrides) -> Interview:
        return await create_interview(session, application, **overrides)

    return _make_interview
