"""Tests for AI generated answers"""

import asyncio
from unittest.mock import AsyncMock, patch

from openai import OpenAIError

from aipilot_api.app.services.ai_service import AIService, build_messages
from aipilot_api.app.services.user_service import UserService

START_BODY = {"positionName": "Backend Engineer", "resumeUrl": "https://example.com/cv.pdf"}


def _start(client, user):
    response = client.post("/api/v1/startInterview", json=START_BODY, headers=user["headers"])
    return response.json()["data"]["interviewId"]


def _question(interview_id):
    return {
        "interviewId": interview_id,
        "jobPosition": "Backend Engineer",
        "prompt": "Why do you want this job?",
        "language": "English",
        "resumeContent": "Ten years of Python.",
    }


class TestBuildMessages:
    """Prompt layout sent to the chat model"""

    def test_four_messages(self):
        messages = build_messages("Backend Engineer", "Why?", "German", "Resume text")
        assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
        assert "German" in messages[0]["content"]
        assert "Backend Engineer" in messages[1]["content"]
        assert "Resume text" in messages[1]["content"]
        assert "Why?" in messages[3]["content"]


class TestAITrigger:
    """POST /api/v1/aiTrigger"""

    def test_answer_costs_one_credit(self, client, user, credits_of):
        interview_id = _start(client, user)
        with patch.object(AIService, "generate_answer", new=AsyncMock(return_value="Because I love Python.")) as gen:
            response = client.post("/api/v1/aiTrigger", json=_question(interview_id), headers=user["headers"])

        assert response.status_code == 200
        assert response.json()["data"] == {"response": "Because I love Python.", "remainingCredits": 29}
        assert credits_of(user["id"]) == 29
        gen.assert_awaited_once_with(
            "Backend Engineer", "Why do you want this job?", "English", "Ten years of Python."
        )

    def test_missing_interview_id(self, client, user):
        response = client.post("/api/v1/aiTrigger", json={"prompt": "hi"}, headers=user["headers"])
        assert response.status_code == 400
        assert response.json()["error"] == "interviewId is missing"

    def test_unknown_interview(self, client, user):
        response = client.post("/api/v1/aiTrigger", json=_question("nope"), headers=user["headers"])
        assert response.status_code == 400
        assert response.json()["code"] == "INTERVIEW_NOT_FOUND"

    def test_ended_interview(self, client, user):
        interview_id = _start(client, user)
        client.post("/api/v1/endInterview", headers=user["headers"])
        response = client.post("/api/v1/aiTrigger", json=_question(interview_id), headers=user["headers"])
        assert response.status_code == 400

    def test_foreign_interview(self, client, make_user):
        owner = make_user("owner@example.com")
        other = make_user("other@example.com")
        interview_id = _start(client, owner)
        response = client.post("/api/v1/aiTrigger", json=_question(interview_id), headers=other["headers"])
        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_no_credits_left(self, client, user):
        interview_id = _start(client, user)
        asyncio.run(UserService.reset_user_credits(user["id"]))
        response = client.post("/api/v1/aiTrigger", json=_question(interview_id), headers=user["headers"])
        assert response.status_code == 403
        assert response.json()["code"] == "INSUFFICIENT_CREDITS"

    def test_openai_failure_keeps_credits(self, client, user, credits_of):
        interview_id = _start(client, user)
        with patch.object(AIService, "generate_answer", new=AsyncMock(side_effect=OpenAIError("upstream down"))):
            response = client.post("/api/v1/aiTrigger", json=_question(interview_id), headers=user["headers"])

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_SERVER_ERROR"
        assert credits_of(user["id"]) == 30


class TestAITriggerPro:
    """POST /api/v1/aiTriggerPro"""

    def test_spoken_answer(self, client, user, credits_of):
        interview_id = _start(client, user)
        with patch.object(AIService, "generate_answer", new=AsyncMock(return_value="Hello")), patch.object(
            AIService, "synthesize_speech", new=AsyncMock(return_value=b"ID3mp3-bytes")
        ) as tts:
            response = client.post("/api/v1/aiTriggerPro", json=_question(interview_id), headers=user["headers"])

        assert response.status_code == 200
        assert response.content == b"ID3mp3-bytes"
        assert response.headers["content-type"] == "audio/mpeg"
        assert response.headers["content-disposition"] == "attachment; filename=audio.mp3"
        assert response.headers["x-remaining-credits"] == "28"
        assert credits_of(user["id"]) == 28
        tts.assert_awaited_once_with("Hello")

    def test_same_checks_as_text_answer(self, client, user):
        response = client.post("/api/v1/aiTriggerPro", json=_question("nope"), headers=user["headers"])
        assert response.status_code == 400
        assert response.json()["code"] == "INTERVIEW_NOT_FOUND"
