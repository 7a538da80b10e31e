"""Tests for interview sessions and the overrun monitor"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from aipilot_api.app.core.config import settings
from aipilot_api.app.core.db import get_connection
from aipilot_api.app.services.exceptions import (
    InsufficientCreditsError,
    InterviewAlreadyStartedError,
    InterviewNotFoundError,
)
from aipilot_api.app.services.interview_monitor_service import InterviewMonitorService
from aipilot_api.app.services.interview_service import InterviewService
from aipilot_api.app.services.user_service import UserService

START_BODY = {"positionName": "Backend Engineer", "resumeUrl": "https://example.com/cv.pdf"}

T0 = datetime(2024, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestStartInterview:
    """POST /api/v1/startInterview"""

    def test_start(self, client, user):
        response = client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["message"] == "Interview started"
        interview = asyncio.run(InterviewService.get_ongoing_interview(data["interviewId"]))
        assert interview.user_id == user["id"]
        assert interview.state is True

    def test_second_start_is_rejected(self, client, user):
        client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
        response = client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
        assert response.status_code == 400
        assert response.json()["code"] == "INTERVIEW_ALREADY_STARTED"

    def test_no_credits(self, client, user):
        asyncio.run(UserService.reset_user_credits(user["id"]))
        response = client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
        assert response.status_code == 403
        assert response.json()["code"] == "INSUFFICIENT_CREDITS"

    def test_missing_parameters(self, client, user):
        response = client.post("/api/v1/startInterview", json={"positionName": "QA"}, headers=user["headers"])
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required parameters"

    def test_requires_token(self, client):
        response = client.post("/api/v1/startInterview", json=START_BODY)
        assert response.status_code == 401


class TestEndInterview:
    """POST /api/v1/endInterview"""

    def test_end(self, client, user):
        client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
        response = client.post("/api/v1/endInterview", json={"userId": user["id"]}, headers=user["headers"])
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["message"] == "Interview ended"
        assert data["duration"] in ("0 minutes", "1 minutes")
        assert asyncio.run(InterviewService.get_ongoing_interview_by_user_id(user["id"])) is None

    def test_end_without_body(self, client, user):
        client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
        response = client.post("/api/v1/endInterview", headers=user["headers"])
        assert response.status_code == 200

    def test_duration_is_localized(self, client, user):
        client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
        response = client.post(
            "/api/v1/endInterview",
            headers={**user["headers"], "Accept-Language": "zh"},
        )
        assert response.json()["data"]["duration"].endswith("分钟")

    def test_nothing_to_end(self, client, user):
        response = client.post("/api/v1/endInterview", json={}, headers=user["headers"])
        assert response.status_code == 400
        assert response.json()["code"] == "INTERVIEW_NOT_FOUND"

    def test_cannot_end_for_another_user(self, client, make_user):
        alice = make_user("alice@example.com")
        bob = make_user("bob@example.com")
        client.post("/api/v1/startInterview", json=START_BODY, headers=bob["headers"])

        response = client.post("/api/v1/endInterview", json={"userId": bob["id"]}, headers=alice["headers"])
        assert response.status_code == 403
        assert asyncio.run(InterviewService.get_ongoing_interview_by_user_id(bob["id"])) is not None


class TestInterviewService:
    """Service level behaviour with an injected clock"""

    def test_duration_rounds_up(self, user):
        asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv", now=T0))
        ended = asyncio.run(InterviewService.end_interview_by_user_id(user["id"], now=T0 + timedelta(seconds=61)))
        assert ended.duration == 2
        assert ended.state is False
        assert ended.end_time == T0 + timedelta(seconds=61)

    def test_duration_minutes(self):
        assert InterviewService.duration_minutes(T0, T0) == 0
        assert InterviewService.duration_minutes(T0, T0 + timedelta(minutes=3)) == 3
        assert InterviewService.duration_minutes(T0, T0 - timedelta(minutes=1)) == 0

    def test_errors(self, user):
        with pytest.raises(InterviewNotFoundError):
            asyncio.run(InterviewService.end_interview_by_user_id(user["id"]))
        asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv"))
        with pytest.raises(InterviewAlreadyStartedError):
            asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv"))

    def test_storage_allows_one_ongoing_interview(self, user, monkeypatch):
        asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv"))

        async def nothing_ongoing(cls, user_id):
            return None

        monkeypatch.setattr(InterviewService, "get_ongoing_interview_by_user_id", classmethod(nothing_ongoing))
        with pytest.raises(InterviewAlreadyStartedError):
            asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv"))

        conn = get_connection()
        try:
            count = conn.execute(
                "SELECT COUNT(*) AS count FROM interviews WHERE user_id = ? AND state = 1",
                (user["id"],),
            ).fetchone()["count"]
        finally:
            conn.close()
        assert count == 1

    def test_insufficient_credits(self, user):
        asyncio.run(UserService.reset_user_credits(user["id"]))
        with pytest.raises(InsufficientCreditsError):
            asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv"))

    def test_history_is_paginated(self, user):
        from aipilot_api.app.schemas.pagination import parse_pagination_params

        for i in range(3):
            asyncio.run(InterviewService.start_interview(user["id"], f"Role {i}", "cv", now=T0 + timedelta(hours=i)))
            asyncio.run(InterviewService.end_interview_by_user_id(user["id"], now=T0 + timedelta(hours=i, minutes=5)))

        items, total = asyncio.run(InterviewService.list_interviews(user["id"], parse_pagination_params("2", "2")))
        assert total == 3
        assert [item.position_name for item in items] == ["Role 0"]


class TestInterviewMonitor:
    """Ending interviews that outlive their owner's credits"""

    def test_overrunning_interview_is_ended(self, user, credits_of):
        asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv", now=T0))

        ended = asyncio.run(InterviewMonitorService.check_and_end_interviews(now=T0 + timedelta(seconds=31)))

        assert [interview.user_id for interview in ended] == [user["id"]]
        assert ended[0].duration == 1
        assert credits_of(user["id"]) == 0
        assert asyncio.run(InterviewService.get_ongoing_interview_by_user_id(user["id"])) is None

    def test_interview_within_budget_is_kept(self, user, credits_of):
        asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv", now=T0))

        ended = asyncio.run(InterviewMonitorService.check_and_end_interviews(now=T0 + timedelta(seconds=30)))

        assert ended == []
        assert credits_of(user["id"]) == 30

    def test_seconds_per_credit(self, user, monkeypatch):
        monkeypatch.setattr(settings, "seconds_per_credit", 60)
        assert not InterviewMonitorService.is_overrunning(T0, 30, T0 + timedelta(minutes=30))
        assert InterviewMonitorService.is_overrunning(T0, 30, T0 + timedelta(minutes=30, seconds=1))

    def test_failed_end_keeps_credits(self, make_user, credits_of, monkeypatch):
        alice = make_user("alice@example.com")
        bob = make_user("bob@example.com")
        for u in (alice, bob):
            asyncio.run(InterviewService.start_interview(u["id"], "QA", "cv", now=T0))

        real_end = InterviewService.end_interview_by_user_id.__func__

        async def flaky_end(cls, user_id, now=None):
            if user_id == alice["id"]:
                raise RuntimeError("storage hiccup")
            return await real_end(cls, user_id, now=now)

        monkeypatch.setattr(InterviewService, "end_interview_by_user_id", classmethod(flaky_end))

        ended = asyncio.run(InterviewMonitorService.check_and_end_interviews(now=T0 + timedelta(hours=1)))

        assert [interview.user_id for interview in ended] == [bob["id"]]
        assert credits_of(alice["id"]) == 30
        assert credits_of(bob["id"]) == 0
        assert asyncio.run(InterviewService.get_ongoing_interview_by_user_id(alice["id"])) is not None

    def test_failed_reset_still_reports_ended_interview(self, user, monkeypatch):
        asyncio.run(InterviewService.start_interview(user["id"], "QA", "cv", now=T0))

        async def broken_reset(cls, user_id):
            raise RuntimeError("storage hiccup")

        monkeypatch.setattr(UserService, "reset_user_credits", classmethod(broken_reset))

        ended = asyncio.run(InterviewMonitorService.check_and_end_interviews(now=T0 + timedelta(hours=1)))

        assert [interview.user_id for interview in ended] == [user["id"]]
        assert asyncio.run(InterviewService.get_ongoing_interview_by_user_id(user["id"])) is None

    def test_start_and_stop(self):
        async def scenario():
            InterviewMonitorService.start_monitor()
            task = InterviewMonitorService._task
            assert task is not None and not task.done()
            await InterviewMonitorService.stop_monitor()
            assert task.cancelled()
            assert InterviewMonitorService._task is None

        asyncio.run(scenario())
