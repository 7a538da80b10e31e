"""
Pydantic models for user data.

``UserRecord`` is the stored representation used inside services and
is never returned as is: it carries the password hash and the e-mail
verification code.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import CamelModel
from .interview import InterviewRead
from .pagination import PaginationResult


class Credentials(BaseModel):
    """Body of ``userRegister`` and ``userLogin``.

    Both fields are optional at the schema level so that a missing one
    is reported with the localized message rather than a generic
    validation error.
    """

    username: Optional[str] = Field(None, examples=["candidate@example.com"])
    password: Optional[str] = Field(None, examples=["strongpassword"])


class UserRecord(BaseModel):
    id: str
    username: str
    password: str
    credits: int = 0
    verification_code: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None


class LoginResponse(CamelModel):
    user_id: str
    access_token: str
    refresh_token: str


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class UserInfoResponse(CamelModel):
    username: str
    credits: int
    is_verified: bool
    # Ongoing interview, if any, as a list of at most one element.
    interviews: List[InterviewRead]
    history: List[InterviewRead]
    pagination: PaginationResult
