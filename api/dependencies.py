"""FastAPI dependencies for dependency injection."""

from typing import Optional
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.schemas.common import PaginationParams
from api.schemas.jobs import JobFilters
from api.services import ApplicationStateMachine, InterviewScheduler, JobLifecycleManager
from core.config import settings
from database.engine import get_db
from database.models import ExperienceLevel, JobCategory, JobType


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
) -> PaginationParams:
    """Pagination from the query string; bounds are enforced as a 400."""
    return PaginationParams(page=page, page_size=page_size)


def get_job_filters(
    category: Optional[JobCategory] = Query(None),
    experience_level: Optional[ExperienceLevel] = Query(None),
    job_type: Optional[JobType] = Query(None),
    location: Optional[str] = Query(None, max_length=255),
    salary_min: Optional[float] = Query(None, ge=0),
    salary_max: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None, max_length=255),
) -> JobFilters:
    """Listing filters from the query string."""
    return JobFilters(
        category=category,
        experience_level=experience_level,
        job_type=job_type,
        location=location,
        salary_min=salary_min,
        salary_max=salary_max,
        search=search,
    )


def get_job_manager(db: AsyncSession = Depends(get_db)) -> JobLifecycleManager:
    return JobLifecycleManager(db)


def get_application_state_machine(
    db: AsyncSession = Depends(get_db),
) -> ApplicationStateMachine:
    return ApplicationStateMachine(db)


def get_interview_scheduler(db: AsyncSession = Depends(get_db)) -> InterviewScheduler:
    return InterviewScheduler(db)
