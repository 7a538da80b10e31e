"""
Pydantic models for interview sessions.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class StartInterviewRequest(CamelModel):
    position_name: Optional[str] = Field(None, examples=["Backend Engineer"])
    resume_url: Optional[str] = Field(None, examples=["https://example.com/cv.pdf"])


class EndInterviewRequest(CamelModel):
    """``userId`` is accepted for older clients and must match the token."""

    user_id: Optional[str] = None


class InterviewRead(CamelModel):
    id: str
    user_id: str
    position_name: str
    resume_url: str
    start_time: datetime
    end_time: Optional[datetime] = None
    # Whole minutes, rounded up; set once the interview has ended.
    duration: Optional[int] = None
    state: bool


class StartInterviewResponse(CamelModel):
    message: str
    interview_id: str


class EndInterviewResponse(CamelModel):
    message: str
    duration: str
