"""
User endpoints for API v1.

Registration, login, token refresh, e-mail verification and the
profile view.  Access tokens live for an hour; clients renew them with
the refresh token sent in the ``x-refresh-token`` header.
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Header, Query, Request, status

from aipilot_api.app.core.i18n import translate
from aipilot_api.app.core.rate_limit import authenticated_user, rate_limit
from aipilot_api.app.core.responses import ApiError, ErrorCode, success
from aipilot_api.app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    token_claims,
)
from aipilot_api.app.schemas.pagination import calculate_pagination, parse_pagination_params
from aipilot_api.app.schemas.user import Credentials, LoginResponse, TokenPair, UserInfoResponse
from aipilot_api.app.services.email_service import EmailService
from aipilot_api.app.services.exceptions import UserNotFoundError, UsernameTakenError
from aipilot_api.app.services.interview_service import InterviewService
from aipilot_api.app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/userRegister", status_code=status.HTTP_201_CREATED)
async def user_register(body: Credentials, request: Request):
    """Register a new user and mail the verification code."""
    if not body.username or not body.password:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "username_password_required"), ErrorCode.INVALID_INPUT)
    if not body.username.isprintable():
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "invalid_username"), ErrorCode.INVALID_INPUT)
    if await UserService.get_user_by_username(body.username):
        raise ApiError(status.HTTP_409_CONFLICT, translate(request, "username_already_exists"), ErrorCode.USERNAME_ALREADY_EXISTS)
    try:
        user = await UserService.create_user(body.username, body.password)
    except UsernameTakenError:
        raise ApiError(status.HTTP_409_CONFLICT, translate(request, "username_already_exists"), ErrorCode.USERNAME_ALREADY_EXISTS)
    await EmailService.send_verification_email(user.username, user.verification_code)
    return success({"message": translate(request, "user_registered")}, status.HTTP_201_CREATED)


@router.post("/userLogin")
async def user_login(body: Credentials, request: Request):
    """Exchange username and password for an access/refresh token pair.

    Unknown users and wrong passwords get the same 401 answer.
    """
    if not body.username or not body.password:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "username_or_password_incorrect"), ErrorCode.INVALID_INPUT)
    user = await UserService.authenticate(body.username, body.password)
    if not user:
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            translate(request, "username_or_password_incorrect"),
            ErrorCode.INVALID_CREDENTIALS,
        )
    claims = token_claims(user.id, user.username, user.is_verified)
    logger.info("User %s logged in", user.id)
    return success(
        LoginResponse(
            user_id=user.id,
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
        )
    )


@router.post("/refreshToken")
async def refresh_token(
    request: Request,
    x_refresh_token: Optional[str] = Header(None),
):
    """Issue a new token pair for a valid refresh token."""
    if not x_refresh_token:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "missing_refresh_token"), ErrorCode.INVALID_INPUT)
    rate_limit()(request)

    decoded = decode_refresh_token(x_refresh_token)
    if not decoded or not decoded.get("sub"):
        logger.info("Refresh token rejected")
        raise ApiError(status.HTTP_401_UNAUTHORIZED, translate(request, "invalid_refresh_token"), ErrorCode.UNAUTHORIZED)
    claims = token_claims(decoded["sub"], decoded.get("username", ""), decoded.get("isVerified", False))
    return success(TokenPair(access_token=create_access_token(claims), refresh_token=create_refresh_token(claims)))


@router.get("/verify-email")
async def verify_email(
    request: Request,
    code: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
):
    """Confirm the e-mail address with the code sent at registration."""
    if not code or not email:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "missing_code_or_email"), ErrorCode.INVALID_INPUT)
    try:
        verified = await UserService.verify_email(email, code)
    except UserNotFoundError:
        raise ApiError(status.HTTP_404_NOT_FOUND, translate(request, "user_not_found"), ErrorCode.USER_NOT_FOUND)
    if not verified:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "invalid_verification_code"), ErrorCode.INVALID_INPUT)
    return success({"message": translate(request, "email_verified")})


@router.get("/getUserInfo")
async def get_user_info(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    current_user: Dict = Depends(authenticated_user()),
):
    """Return credits, verification state, the ongoing interview and interview history."""
    user_id = current_user["sub"]
    user = await UserService.get_user_by_id(user_id)
    if not user:
        raise ApiError(status.HTTP_404_NOT_FOUND, translate(request, "user_not_found"), ErrorCode.USER_NOT_FOUND)

    ongoing = await InterviewService.get_ongoing_interview_by_user_id(user_id)
    params = parse_pagination_params(page, limit)
    history, total = await InterviewService.list_interviews(user_id, params)
    return success(
        UserInfoResponse(
            username=user.username,
            credits=user.credits,
            is_verified=user.is_verified,
            interviews=[ongoing] if ongoing else [],
            history=history,
            pagination=calculate_pagination(total, params),
        )
    )
