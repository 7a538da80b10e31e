"""
Interview endpoints for API v1.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Body, Depends, Request, status

from aipilot_api.app.core.i18n import translate
from aipilot_api.app.core.rate_limit import authenticated_user
from aipilot_api.app.core.responses import ApiError, ErrorCode, success
from aipilot_api.app.schemas.interview import (
    EndInterviewRequest,
    EndInterviewResponse,
    StartInterviewRequest,
    StartInterviewResponse,
)
from aipilot_api.app.services.exceptions import (
    InsufficientCreditsError,
    InterviewAlreadyStartedError,
    InterviewNotFoundError,
    UserNotFoundError,
)
from aipilot_api.app.services.interview_service import InterviewService

router = APIRouter()


@router.post("/startInterview")
async def start_interview(
    body: StartInterviewRequest,
    request: Request,
    current_user: Dict = Depends(authenticated_user()),
):
    """Start an interview; the caller must have credits and no interview in progress."""
    if not body.position_name or not body.resume_url:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "missing_parameters"), ErrorCode.INVALID_INPUT)
    try:
        interview = await InterviewService.start_interview(current_user["sub"], body.position_name, body.resume_url)
    except InterviewAlreadyStartedError:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            translate(request, "interview_already_started"),
            ErrorCode.INTERVIEW_ALREADY_STARTED,
        )
    except UserNotFoundError:
        raise ApiError(status.HTTP_404_NOT_FOUND, translate(request, "user_not_found"), ErrorCode.USER_NOT_FOUND)
    except InsufficientCreditsError:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            translate(request, "insufficient_credits_start"),
            ErrorCode.INSUFFICIENT_CREDITS,
        )
    return success(StartInterviewResponse(message=translate(request, "interview_started"), interview_id=interview.id))


@router.post("/endInterview")
async def end_interview(
    request: Request,
    body: Optional[EndInterviewRequest] = Body(None),
    current_user: Dict = Depends(authenticated_user()),
):
    """End the caller's ongoing interview and report its duration."""
    user_id = current_user["sub"]
    if body and body.user_id and body.user_id != user_id:
        raise ApiError(status.HTTP_403_FORBIDDEN, translate(request, "interview_forbidden"), ErrorCode.FORBIDDEN)
    try:
        interview = await InterviewService.end_interview_by_user_id(user_id)
    except InterviewNotFoundError:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            translate(request, "interview_not_found"),
            ErrorCode.INTERVIEW_NOT_FOUND,
        )
    return success(
        EndInterviewResponse(
            message=translate(request, "interview_ended"),
            duration=translate(request, "interview_duration", minutes=interview.duration),
        )
    )
