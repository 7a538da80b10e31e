"""
AI generated interview answers.

The model plays the candidate: it receives the job position and the
resume text, then answers the interviewer's question briefly.  A text
answer costs 1 credit; an answer converted to speech costs 2.  Credits
are deducted only after the OpenAI calls succeed.
"""

import logging
from functools import lru_cache
from typing import List, Tuple

from openai import AsyncOpenAI

from ..core.config import settings
from ..schemas.ai import AITriggerRequest
from ..schemas.user import UserRecord
from .exceptions import InsufficientCreditsError, InterviewNotFoundError, UserNotFoundError
from .interview_service import InterviewService
from .user_service import UserService

logger = logging.getLogger(__name__)

TEXT_ANSWER_COST = 1
SPOKEN_ANSWER_COST = 2


@lru_cache(maxsize=1)
def get_client() -> AsyncOpenAI:
    return AsyncOpenAI(api_key=settings.openai_api_key or None)


def build_messages(job_position: str, prompt: str, language: str, resume_content: str) -> List[dict]:
    return [
        {
            "role": "system",
            "content": (
                f"You are a job candidate in an interview. Answer questions in {language} "
                "based on the provided resume. Your responses should be concise, highlighting "
                "only the most relevant points. Be professional and specific, focusing on key "
                "achievements and skills."
            ),
        },
        {
            "role": "user",
            "content": (
                f"Job Position: {job_position}\n\nResume content:\n\n{resume_content}\n\n"
                "Remember this information for your responses."
            ),
        },
        {
            "role": "assistant",
            "content": "Understood. I'm ready to provide concise, relevant answers based on the resume.",
        },
        {
            "role": "user",
            "content": f"Interviewer's question: {prompt}\nProvide a brief, focused answer highlighting key points.",
        },
    ]


class AIService:
    """Answers interview questions on behalf of the user."""

    @classmethod
    async def check_can_answer(cls, interview_id: str, user_id: str) -> UserRecord:
        """Validate that ``user_id`` may request an answer in ``interview_id``.

        Raises ``InterviewNotFoundError``, ``PermissionError``,
        ``UserNotFoundError`` or ``InsufficientCreditsError``.
        """
        interview = await InterviewService.get_ongoing_interview(interview_id)
        if not interview:
            raise InterviewNotFoundError(interview_id)
        if interview.user_id != user_id:
            raise PermissionError(interview_id)
        user = await UserService.get_user_by_id(interview.user_id)
        if not user:
            raise UserNotFoundError(interview.user_id)
        if user.credits <= 0:
            raise InsufficientCreditsError(user.id)
        return user

    @classmethod
    async def generate_answer(cls, job_position: str, prompt: str, language: str, resume_content: str) -> str:
        response = await get_client().chat.completions.create(
            model=settings.openai_chat_model,
            messages=build_messages(job_position, prompt, language, resume_content),
            max_tokens=settings.openai_max_tokens,
        )
        return response.choices[0].message.content or ""

    @classmethod
    async def synthesize_speech(cls, text: str) -> bytes:
        response = await get_client().audio.speech.create(
            model=settings.openai_tts_model,
            voice=settings.openai_tts_voice,
            input=text,
        )
        return response.content

    @classmethod
    async def answer(cls, user_id: str, body: AITriggerRequest) -> Tuple[str, UserRecord]:
        """Generate a text answer and charge ``TEXT_ANSWER_COST``."""
        user = await cls.check_can_answer(body.interview_id, user_id)
        text = await cls.generate_answer(body.job_position, body.prompt, body.language, body.resume_content)
        updated = await UserService.reduce_user_credits(user.id, TEXT_ANSWER_COST)
        return text, updated

    @classmethod
    async def answer_spoken(cls, user_id: str, body: AITriggerRequest) -> Tuple[bytes, UserRecord]:
        """Generate an answer, convert it to MP3 speech and charge ``SPOKEN_ANSWER_COST``."""
        user = await cls.check_can_answer(body.interview_id, user_id)
        text = await cls.generate_answer(body.job_position, body.prompt, body.language, body.resume_content)
        audio = await cls.synthesize_speech(text)
        logger.info("Converted answer for interview %s to speech (%s bytes)", body.interview_id, len(audio))
        updated = await UserService.reduce_user_credits(user.id, SPOKEN_ANSWER_COST)
        return audio, updated
