"""
CV upload endpoint for API v1.

The uploaded file is not stored; its text is extracted and returned so
the client can pass it along as ``resumeContent`` to ``aiTrigger``.
"""

import asyncio
from typing import Dict, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from aipilot_api.app.core.i18n import translate
from aipilot_api.app.core.rate_limit import authenticated_user
from aipilot_api.app.core.responses import ApiError, ErrorCode, success
from aipilot_api.app.services.cv_service import MAX_FILE_SIZE, SUPPORTED_MIME_TYPES, CVService
from aipilot_api.app.services.exceptions import FileProcessingError, UnsupportedFileTypeError

router = APIRouter()


@router.post("/uploadCV")
async def upload_cv(
    request: Request,
    file: Optional[UploadFile] = File(None),
    current_user: Dict = Depends(authenticated_user()),
):
    """Extract plain text from a PDF, Word or text CV (max 5 MB)."""
    if file is None:
        raise ApiError(status.HTTP_400_BAD_REQUEST, translate(request, "no_file_uploaded"), ErrorCode.INVALID_INPUT)

    # One byte past the limit is enough to reject the upload.
    data = await file.read(MAX_FILE_SIZE + 1)
    if len(data) > MAX_FILE_SIZE:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            translate(request, "file_too_large", limit_mb=MAX_FILE_SIZE // (1024 * 1024)),
            ErrorCode.INVALID_INPUT,
        )
    mime_type = (file.content_type or "").split(";")[0].strip().lower()
    try:
        text = await asyncio.to_thread(CVService.extract_text, data, mime_type)
    except UnsupportedFileTypeError:
        raise ApiError(
            status.HTTP_400_BAD_REQUEST,
            translate(request, "unsupported_file_type", types=", ".join(SUPPORTED_MIME_TYPES)),
            ErrorCode.INVALID_INPUT,
        )
    except FileProcessingError as e:
        raise ApiError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            translate(request, "file_processing_failed", reason=str(e)),
            ErrorCode.INTERNAL_SERVER_ERROR,
        )
    return success({"fileContent": text})
