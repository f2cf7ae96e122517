"""
Job posting endpoints.

Listing routes run the expiry sweep before filtering; single-job reads
report the effective status instead.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Path, status

from api.dependencies import get_job_filters, get_job_manager, get_pagination_params
from api.schemas.common import APIResponse, MessageResponse, PaginatedResponse, PaginationParams
from api.schemas.jobs import JobCreate, JobFilters, JobResponse, JobUpdate, MyJobResponse
from api.services import JobLifecycleManager
from core.middleware.authentication import Identity
from core.middleware.authorization import get_optional_identity, require_employer

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get(
    "",
    response_model=APIResponse[PaginatedResponse[JobResponse]],
    summary="List Jobs",
    description="Active jobs, newest first. Expired jobs are closed before filtering.",
)
async def list_jobs(
    filters: JobFilters = Depends(get_job_filters),
    pagination: PaginationParams = Depends(get_pagination_params),
    identity: Optional[Identity] = Depends(get_optional_identity),
    manager: JobLifecycleManager = Depends(get_job_manager),
):
    """
    List open job postings.

    - **category**, **experience_level**, **job_type**: exact matches
    - **location**: case-insensitive substring
    - **salary_min** / **salary_max**: salary band bounds
    - **search**: case-insensitive substring of title or description
    """
    jobs, total = await manager.list_jobs(filters, pagination)
    items = [JobResponse.from_job(job) for job in jobs]
    return APIResponse(data=PaginatedResponse.create(items, total, pagination))


@router.get(
    "/my-jobs",
    response_model=APIResponse[PaginatedResponse[MyJobResponse]],
    summary="List My Jobs",
    description="The calling employer's jobs with ACTIVE/CLOSED status and application counts.",
)
async def list_my_jobs(
    pagination: PaginationParams = Depends(get_pagination_params),
    identity: Identity = Depends(require_employer),
    manager: JobLifecycleManager = Depends(get_job_manager),
):
    rows, total = await manager.list_my_jobs(identity.id, pagination)
    items = [
        MyJobResponse.from_job(job, applications_count=count) for job, count in rows
    ]
    return APIResponse(data=PaginatedResponse.create(items, total, pagination))


@router.get(
    "/{job_id}",
    response_model=APIResponse[JobResponse],
    summary="Get Job",
)
async def get_job(
    job_id: int = Path(..., ge=1),
    identity: Optional[Identity] = Depends(get_optional_identity),
    manager: JobLifecycleManager = Depends(get_job_manager),
):
    """Get one job; a job past its deadline is reported CLOSED."""
    job = await manager.get_job(job_id)
    return APIResponse(data=JobResponse.from_job(job))


@router.post(
    "",
    response_model=APIResponse[JobResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create Job",
)
async def create_job(
    payload: JobCreate,
    identity: Identity = Depends(require_employer),
    manager: JobLifecycleManager = Depends(get_job_manager),
):
    """
    Post a new job.

    - **location**: required unless **is_remote**; remote jobs are stored as "Remote"
    - **contact_phone**: 7-15 digits, prefixed with **contact_country_code** if given
    - **images**: uploaded image URLs, only the first is attached
    """
    job = await manager.create_job(identity.id, payload)
    return APIResponse(data=JobResponse.from_job(job), message="Job created successfully")


@router.put(
    "/{job_id}",
    response_model=APIResponse[JobResponse],
    summary="Update Job",
    description="Partial edit by the owner. Send is_active to open or close the posting.",
)
async def update_job(
    payload: JobUpdate,
    job_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_employer),
    manager: JobLifecycleManager = Depends(get_job_manager),
):
    job = await manager.update_job(job_id, identity.id, payload)
    return APIResponse(data=JobResponse.from_job(job), message="Job updated successfully")


@router.delete(
    "/{job_id}",
    response_model=MessageResponse,
    summary="Delete Job",
    description="Delete a job together with its applications and their interviews.",
)
async def delete_job(
    job_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_employer),
    manager: JobLifecycleManager = Depends(get_job_manager),
):
    await manager.delete_job(job_id, identity.id)
    return MessageResponse(message="Job deleted successfully")
