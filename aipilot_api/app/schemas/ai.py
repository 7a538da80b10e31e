"""
Pydantic models for AI generated answers.
"""

from typing import Optional

from pydantic import Field

from .base import CamelModel


class AITriggerRequest(CamelModel):
    interview_id: Optional[str] = None
    job_position: str = Field("", examples=["Backend Engineer"])
    prompt: str = Field("", examples=["Tell me about a project you are proud of."])
    language: str = Field("English", examples=["English"])
    resume_content: str = ""


class AITriggerResponse(CamelModel):
    response: str
    remaining_credits: int
