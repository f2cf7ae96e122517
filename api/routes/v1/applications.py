"""
Application endpoints.

Job seekers apply and follow their own applications; employers review the
applications to jobs they own and schedule interviews on them.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import (
    get_application_state_machine,
    get_interview_scheduler,
    get_pagination_params,
)
from api.schemas.applications import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
)
from api.schemas.common import APIResponse, PaginatedResponse, PaginationParams
from api.schemas.interviews import InterviewCreate, InterviewResponse
from api.services import ApplicationStateMachine, InterviewScheduler
from core.middleware.authentication import Identity, Role
from core.middleware.authorization import (
    require_employer,
    require_identity,
    require_job_seeker,
    require_role,
)
from database.models import ApplicationStatus

router = APIRouter(prefix="/applications", tags=["applications"])


def _page(applications, total: int, pagination: PaginationParams):
    items = [ApplicationResponse.model_validate(a) for a in applications]
    return APIResponse(data=PaginatedResponse.create(items, total, pagination))


@router.post(
    "/apply",
    response_model=APIResponse[ApplicationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Apply for Job",
    description="Apply to an open job. 409 if already applied, 422 if the job is closed.",
)
async def apply_for_job(
    payload: ApplicationCreate,
    identity: Identity = Depends(require_job_seeker),
    machine: ApplicationStateMachine = Depends(get_application_state_machine),
):
    application = await machine.create(
        payload.job_id,
        identity.id,
        cover_letter=payload.cover_letter,
        attachments=payload.attachments,
    )
    return APIResponse(
        data=ApplicationResponse.model_validate(application),
        message="Application submitted successfully",
    )


@router.get(
    "/my-applications",
    response_model=APIResponse[PaginatedResponse[ApplicationResponse]],
    summary="List My Applications",
)
async def list_my_applications(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    pagination: PaginationParams = Depends(get_pagination_params),
    identity: Identity = Depends(require_job_seeker),
    machine: ApplicationStateMachine = Depends(get_application_state_machine),
):
    applications, total = await machine.list_for_job_seeker(
        identity.id, pagination, status_filter
    )
    return _page(applications, total, pagination)


@router.get(
    "/employer",
    response_model=APIResponse[PaginatedResponse[ApplicationResponse]],
    summary="List Employer Applications",
    description="Applications across every job owned by the calling employer.",
)
async def list_employer_applications(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    pagination: PaginationParams = Depends(get_pagination_params),
    identity: Identity = Depends(require_employer),
    machine: ApplicationStateMachine = Depends(get_application_state_machine),
):
    applications, total = await machine.list_for_employer(
        identity.id, pagination, status_filter
    )
    return _page(applications, total, pagination)


@router.get(
    "/job/{job_id}",
    response_model=APIResponse[PaginatedResponse[ApplicationResponse]],
    summary="List Job Applications",
)
async def list_job_applications(
    job_id: int = Path(..., ge=1),
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    pagination: PaginationParams = Depends(get_pagination_params),
    identity: Identity = Depends(require_employer),
    machine: ApplicationStateMachine = Depends(get_application_state_machine),
):
    applications, total = await machine.list_for_job(
        job_id, identity.id, pagination, status_filter
    )
    return _page(applications, total, pagination)


@router.get(
    "/{application_id}",
    response_model=APIResponse[ApplicationResponse],
    summary="Get Application",
)
async def get_application(
    application_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_identity),
    machine: ApplicationStateMachine = Depends(get_application_state_machine),
):
    application = await machine.get_for_participant(application_id, identity)
    return APIResponse(data=ApplicationResponse.model_validate(application))


@router.patch(
    "/{application_id}/status",
    response_model=APIResponse[ApplicationResponse],
    summary="Update Application Status",
    description="Any status may follow any other. Send expected_version to detect concurrent edits.",
)
async def update_application_status(
    payload: ApplicationStatusUpdate,
    application_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_employer),
    machine: ApplicationStateMachine = Depends(get_application_state_machine),
):
    application = await machine.update_status(
        application_id,
        identity.id,
        payload.status,
        expected_version=payload.expected_version,
    )
    return APIResponse(
        data=ApplicationResponse.model_validate(application),
        message="Application status updated successfully",
    )


@router.post(
    "/{application_id}/schedule-interview",
    response_model=APIResponse[InterviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Schedule Interview",
    description="Add an interview to the application. Existing interviews are kept.",
)
async def schedule_interview(
    payload: InterviewCreate,
    application_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_employer),
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    interview = await scheduler.schedule(application_id, identity.id, payload)
    return APIResponse(
        data=InterviewResponse.model_validate(interview),
        message="Interview scheduled successfully",
    )


@router.get(
    "/{application_id}/interviews",
    response_model=APIResponse[list[InterviewResponse]],
    summary="List Application Interviews",
)
async def list_application_interviews(
    application_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_role(Role.EMPLOYER, Role.JOB_SEEKER)),
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    interviews = await scheduler.list_for_application(application_id, identity)
    return APIResponse(data=[InterviewResponse.model_validate(i) for i in interviews])
