"""
AI answer endpoints for API v1.

``aiTrigger`` returns the answer as text; ``aiTriggerPro`` returns it
as MP3 speech.  Both require an ongoing interview owned by the caller
and a positive credit balance.
"""

import logging
from typing import Awaitable, Dict, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from openai import OpenAIError

from aipilot_api.app.core.i18n import translate
from aipilot_api.app.core.rate_limit import authenticated_user
from aipilot_api.app.core.responses import ApiError, ErrorCode, success
from aipilot_api.app.schemas.ai import AITriggerRequest, AITriggerResponse
from aipilot_api.app.services.ai_service import AIService
from aipilot_api.app.services.exceptions import (
    InsufficientCreditsError,
    InterviewNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")


async def _guarded(request: Request, call: Awaitable[T]) -> T:
    """Await ``call`` and map the answer preconditions to HTTP errors."""
    try:
        return await call
    except InterviewNotFoundError:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "interview_not_found"), ErrorCode.INTERVIEW_NOT_FOUND)
    except PermissionError:
        raise ApiError(status.HTTP_403_FORBIDDEN, translate(request, "interview_forbidden"), ErrorCode.FORBIDDEN)
    except UserNotFoundError:
        raise ApiError(status.HTTP_404_NOT_FOUND, translate(request, "user_not_found"), ErrorCode.USER_NOT_FOUND)
    except InsufficientCreditsError:
        raise ApiError(
            status.HTTP_403_FORBIDDEN,
            translate(request, "insufficient_credits_continue"),
            ErrorCode.INSUFFICIENT_CREDITS,
        )
    except OpenAIError as e:
        logger.exception("OpenAI request failed: %s", e)
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            translate(request, "internal_server_error"),
            ErrorCode.INTERNAL_SERVER_ERROR,
        )


def _require_interview_id(request: Request, body: AITriggerRequest) -> None:
    if not body.interview_id:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "missing_interview_id"), ErrorCode.INVALID_INPUT)


@router.post("/aiTrigger")
async def ai_trigger(
    body: AITriggerRequest,
    request: Request,
    current_user: Dict = Depends(authenticated_user()),
):
    """Answer the interviewer's question as text (1 credit)."""
    _require_interview_id(request, body)
    text, user = await _guarded(request, AIService.answer(current_user["sub"], body))
    return success(AITriggerResponse(response=text, remaining_credits=user.credits))


@router.post("/aiTriggerPro")
async def ai_trigger_pro(
    body: AITriggerRequest,
    request: Request,
    current_user: Dict = Depends(authenticated_user()),
):
    """Answer the interviewer's question as MP3 speech (2 credits)."""
    _require_interview_id(request, body)
    audio, user = await _guarded(request, AIService.answer_spoken(current_user["sub"], body))
    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={
            "Content-Disposition": "attachment; filename=audio.mp3",
            "X-Remaining-Credits": str(user.credits),
        },
    )
