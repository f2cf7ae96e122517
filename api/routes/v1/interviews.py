"""
Interview endpoints.

Scheduling lives under ``/applications/{id}/schedule-interview``; these
routes read, edit and delete existing interviews.
"""

from fastapi import APIRouter, Depends, Path

from api.dependencies import get_interview_scheduler
from api.schemas.common import APIResponse, MessageResponse
from api.schemas.interviews import (
    InterviewResponse,
    InterviewUpdate,
    UpcomingInterviewResponse,
)
from api.services import InterviewScheduler
from core.middleware.authentication import Identity
from core.middleware.authorization import (
    require_employer,
    require_identity,
    require_job_seeker,
)

router = APIRouter(prefix="/interviews", tags=["interviews"])


@router.get(
    "/upcoming",
    response_model=APIResponse[list[UpcomingInterviewResponse]],
    summary="List Upcoming Interviews",
    description="Future SCHEDULED or CONFIRMED interviews for the calling job seeker, soonest first.",
)
async def list_upcoming_interviews(
    identity: Identity = Depends(require_job_seeker),
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    rows = await scheduler.list_upcoming(identity.id)
    return APIResponse(
        data=[
            UpcomingInterviewResponse(
                **InterviewResponse.model_validate(row["interview"]).model_dump(),
                job_id=row["job_id"],
                job_title=row["job_title"],
            )
            for row in rows
        ]
    )


@router.get(
    "/{interview_id}",
    response_model=APIResponse[InterviewResponse],
    summary="Get Interview",
)
async def get_interview(
    interview_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_identity),
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    interview = await scheduler.get_for_participant(interview_id, identity)
    return APIResponse(data=InterviewResponse.model_validate(interview))


@router.put(
    "/{interview_id}",
    response_model=APIResponse[InterviewResponse],
    summary="Update Interview",
    description="Partial update; omitted fields are unchanged.",
)
async def update_interview(
    payload: InterviewUpdate,
    interview_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_employer),
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    interview = await scheduler.update(interview_id, identity.id, payload)
    return APIResponse(
        data=InterviewResponse.model_validate(interview),
        message="Interview updated successfully",
    )


@router.delete(
    "/{interview_id}",
    response_model=MessageResponse,
    summary="Delete Interview",
)
async def delete_interview(
    interview_id: int = Path(..., ge=1),
    identity: Identity = Depends(require_employer),
    scheduler: InterviewScheduler = Depends(get_interview_scheduler),
):
    await scheduler.delete(interview_id, identity.id)
    return MessageResponse(message="Interview deleted successfully")
