"""
Uniform JSON envelope for every response.

Successful responses look like ``{"success": true, "data": ...}`` and
failures like ``{"success": false, "error": "...", "code": "..."}``.
Endpoints return ``success(...)`` and raise ``ApiError``; the handlers
registered by ``register_exception_handlers`` render errors, request
validation failures and unexpected exceptions in the same shape.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from .i18n import translate

logger = logging.getLogger(__name__)


class ErrorCode:
    """Machine readable error codes returned in the ``code`` field."""

    INVALID_INPUT = "INVALID_INPUT"
    USERNAME_ALREADY_EXISTS = "USERNAME_ALREADY_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INTERVIEW_ALREADY_STARTED = "INTERVIEW_ALREADY_STARTED"
    INTERVIEW_NOT_FOUND = "INTERVIEW_NOT_FOUND"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_ALREADY_COMPLETED = "ORDER_ALREADY_COMPLETED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


_DEFAULT_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.INVALID_INPUT,
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMIT_EXCEEDED,
}


class ApiError(HTTPException):
    """HTTP error that also carries an ``ErrorCode``."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code or _DEFAULT_CODES.get(status_code, ErrorCode.INTERNAL_SERVER_ERROR)


def success(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": True, "data": jsonable_encoder(data)},
    )


def error(message: str, status_code: int = status.HTTP_400_BAD_REQUEST, code: Optional[str] = None, headers: Optional[dict] = None) -> JSONResponse:
    body = {"success": False, "error": message}
    if code:
        body["code"] = code
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = getattr(exc, "code", None) or _DEFAULT_CODES.get(exc.status_code)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error(message, exc.status_code, code, headers=getattr(exc, "headers", None))


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Report the first failing field; clients only display one message.
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error(message, status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_INPUT)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error(
        translate(request, "internal_server_error"),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach envelope-rendering handlers to ``app``."""
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
