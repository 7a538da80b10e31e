"""
Background reconciliation of overrunning interviews.

Interviews are billed by time: every credit buys
``settings.seconds_per_credit`` seconds.  The monitor scans all ongoing
interviews; when one has run longer than its owner's credits allow,
the owner's credits are reset to zero and the interview is ended.

The scan runs periodically inside the API process (see
``start_monitor``) and can be triggered once from the command line
with ``check_interviews.py``.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from ..core.config import settings
from ..schemas.interview import InterviewRead
from .exceptions import InterviewNotFoundError, UserNotFoundError
from .interview_service import InterviewService, utcnow
from .user_service import UserService

logger = logging.getLogger(__name__)


class InterviewMonitorService:
    """Ends interviews whose owners ran out of credits."""

    _task: Optional["asyncio.Task[None]"] = None

    @staticmethod
    def is_overrunning(start_time: datetime, credits: int, now: datetime) -> bool:
        elapsed_seconds = int((now - start_time).total_seconds())
        return elapsed_seconds > credits * settings.seconds_per_credit

    @classmethod
    async def check_and_end_interviews(cls, now: Optional[datetime] = None) -> List[InterviewRead]:
        """Run one scan and return the interviews that were ended."""
        now = now or utcnow()
        ended: List[InterviewRead] = []
        for interview in await InterviewService.list_ongoing_interviews():
            try:
                user = await UserService.get_user_by_id(interview.user_id)
                if not user:
                    continue
                if not cls.is_overrunning(interview.start_time, user.credits, now):
                    continue
                logger.info(
                    "Ending interview %s of user %s: %s s elapsed, %s credits",
                    interview.id,
                    user.id,
                    int((now - interview.start_time).total_seconds()),
                    user.credits,
                )
                ended.append(await InterviewService.end_interview_by_user_id(user.id, now=now))
                await UserService.reset_user_credits(user.id)
            except (InterviewNotFoundError, UserNotFoundError):
                # Ended or deleted between the scan and the update.
                logger.info("Interview %s changed during the scan, skipping", interview.id)
            except Exception:
                logger.exception("Failed to reconcile interview %s", interview.id)
        if ended:
            logger.info("Interview monitor ended %s interview(s)", len(ended))
        return ended

    @classmethod
    async def run_forever(cls, interval_seconds: int) -> None:
        while True:
            try:
                await cls.check_and_end_interviews()
            except Exception:
                logger.exception("Interview monitor scan failed")
            await asyncio.sleep(interval_seconds)

    @classmethod
    def start_monitor(cls) -> None:
        """Schedule the periodic scan on the running event loop."""
        if cls._task and not cls._task.done():
            return
        interval = settings.interview_monitor_interval_seconds
        logger.info("Starting interview monitor, interval %s s", interval)
        cls._task = asyncio.get_running_loop().create_task(cls.run_forever(interval))

    @classmethod
    async def stop_monitor(cls) -> None:
        task, cls._task = cls._task, None
        if not task:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
