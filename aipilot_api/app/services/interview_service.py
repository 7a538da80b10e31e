"""
Business logic for interview sessions.

An interview is *ongoing* while ``state`` is true.  A user may have at
most one ongoing interview; starting requires a positive credit
balance.  Ending records the end time and the duration in whole
minutes, rounded up.
"""

import logging
import math
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..core.db import get_connection
from ..schemas.interview import InterviewRead
from ..schemas.pagination import PaginationParams
from .exceptions import (
    InsufficientCreditsError,
    InterviewAlreadyStartedError,
    InterviewNotFoundError,
    UserNotFoundError,
)
from .user_service import UserService

logger = logging.getLogger(__name__)

_INTERVIEW_COLUMNS = "id, user_id, position_name, resume_url, start_time, end_time, duration, state"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _row_to_interview(row: sqlite3.Row) -> InterviewRead:
    return InterviewRead(
        id=row["id"],
        user_id=row["user_id"],
        position_name=row["position_name"],
        resume_url=row["resume_url"],
        start_time=parse_timestamp(row["start_time"]),
        end_time=parse_timestamp(row["end_time"]) if row["end_time"] else None,
        duration=row["duration"],
        state=bool(row["state"]),
    )


class InterviewService:
    """Start, end and look up interviews."""

    @classmethod
    async def get_ongoing_interview(cls, interview_id: str) -> Optional[InterviewRead]:
        """Return the interview if it exists and is still ongoing."""
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {_INTERVIEW_COLUMNS} FROM interviews WHERE id = ? AND state = 1",
                (interview_id,),
            ).fetchone()
            return _row_to_interview(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def get_ongoing_interview_by_user_id(cls, user_id: str) -> Optional[InterviewRead]:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {_INTERVIEW_COLUMNS} FROM interviews WHERE user_id = ? AND state = 1 "
                "ORDER BY start_time DESC LIMIT 1",
                (user_id,),
            ).fetchone()
            return _row_to_interview(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def list_ongoing_interviews(cls) -> List[InterviewRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT {_INTERVIEW_COLUMNS} FROM interviews WHERE state = 1"
            ).fetchall()
            return [_row_to_interview(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def list_interviews(cls, user_id: str, params: PaginationParams) -> Tuple[List[InterviewRead], int]:
        """Return one page of the user's interviews (newest first) and the total count."""
        conn = get_connection()
        try:
            total = conn.execute(
                "SELECT COUNT(*) AS count FROM interviews WHERE user_id = ?",
                (user_id,),
            ).fetchone()["count"]
            rows = conn.execute(
                f"SELECT {_INTERVIEW_COLUMNS} FROM interviews WHERE user_id = ? "
                "ORDER BY start_time DESC LIMIT ? OFFSET ?",
                (user_id, params.limit, params.offset),
            ).fetchall()
            return [_row_to_interview(row) for row in rows], total
        finally:
            conn.close()

    @classmethod
    async def start_interview(
        cls,
        user_id: str,
        position_name: str,
        resume_url: str,
        now: Optional[datetime] = None,
    ) -> InterviewRead:
        """Open a new interview for ``user_id``.

        Raises
        ------
        InterviewAlreadyStartedError
            The user already has an ongoing interview.
        UserNotFoundError
            The user does not exist.
        InsufficientCreditsError
            The user has no credits left.
        """
        if await cls.get_ongoing_interview_by_user_id(user_id):
            raise InterviewAlreadyStartedError(user_id)
        user = await UserService.get_user_by_id(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        if user.credits <= 0:
            raise InsufficientCreditsError(user_id)

        interview = InterviewRead(
            id=str(uuid.uuid4()),
            user_id=user_id,
            position_name=position_name,
            resume_url=resume_url,
            start_time=now or utcnow(),
            state=True,
        )
        conn = get_connection()
        try:
            conn.execute(
                f"INSERT INTO interviews ({_INTERVIEW_COLUMNS}) VALUES (?, ?, ?, ?, ?, NULL, NULL, 1)",
                (
                    interview.id,
                    interview.user_id,
                    interview.position_name,
                    interview.resume_url,
                    interview.start_time.isoformat(),
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError:
            # Another request opened one between the check and the insert.
            raise InterviewAlreadyStartedError(user_id)
        finally:
            conn.close()
        logger.info("User %s started interview %s for %s", user_id, interview.id, position_name)
        return interview

    @staticmethod
    def duration_minutes(start_time: datetime, end_time: datetime) -> int:
        seconds = (end_time - start_time).total_seconds()
        return max(0, math.ceil(seconds / 60))

    @classmethod
    async def end_interview_by_user_id(cls, user_id: str, now: Optional[datetime] = None) -> InterviewRead:
        """Close the user's ongoing interview.

        Raises ``InterviewNotFoundError`` if there is none.
        """
        interview = await cls.get_ongoing_interview_by_user_id(user_id)
        if not interview:
            raise InterviewNotFoundError(user_id)
        end_time = now or utcnow()
        duration = cls.duration_minutes(interview.start_time, end_time)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE interviews SET end_time = ?, duration = ?, state = 0 WHERE id = ? AND state = 1",
                (end_time.isoformat(), duration, interview.id),
            )
            if cursor.rowcount == 0:
                # Ended concurrently (e.g. by the monitor).
                raise InterviewNotFoundError(user_id)
            conn.commit()
        finally:
            conn.close()
        logger.info("Interview %s of user %s ended after %s minutes", interview.id, user_id, duration)
        return interview.model_copy(update={"end_time": end_time, "duration": duration, "state": False})
