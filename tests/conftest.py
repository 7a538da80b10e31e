import asyncio

import pytest
from fastapi.testclient import TestClient

from aipilot_api.app.core.config import settings
from aipilot_api.app.core.db import init_db
from aipilot_api.app.core.rate_limit import storage
from aipilot_api.app.main import app
from aipilot_api.app.services.user_service import UserService


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Fresh SQLite file per test, no SMTP, empty rate limiter."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "test.db"))
    monkeypatch.setattr(settings, "email_user", "")
    init_db()
    storage.reset()
    yield
    storage.reset()


@pytest.fixture
def client():
    """Test client; startup hooks (and thus the monitor) are not run."""
    return TestClient(app)


@pytest.fixture
def make_user(client):
    """Register and log in a user; returns id, username and auth headers."""

    def _make_user(username="candidate@example.com", password="secret123"):
        response = client.post("/api/v1/userRegister", json={"username": username, "password": password})
        assert response.status_code == 201
        response = client.post("/api/v1/userLogin", json={"username": username, "password": password})
        assert response.status_code == 200
        data = response.json()["data"]
        return {
            "id": data["userId"],
            "username": username,
            "headers": {"Authorization": f"Bearer {data['accessToken']}"},
            "refresh_token": data["refreshToken"],
        }

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def credits_of():
    """Read a user's current balance straight from storage."""

    def _credits_of(user_id):
        return asyncio.run(UserService.get_user_by_id(user_id)).credits

    return _credits_of
