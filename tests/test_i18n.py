"""Tests for Accept-Language based translation"""

import json

import pytest

from aipilot_api.app.core.i18n import CATALOGS, LOCALES_DIR, SUPPORTED_LANGUAGES, gettext, resolve_language


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, "en"),
        ("", "en"),
        ("zh", "zh"),
        ("zh-CN,zh;q=0.9,en;q=0.8", "zh"),
        ("en-US", "en"),
        ("fr-FR", "en"),
        ("../../etc", "en"),
        ("en-GB-oxendict", "en"),
    ],
)
def test_resolve_language(header, expected):
    assert resolve_language(header) == expected


def test_placeholders():
    assert gettext("en", "interview_duration", minutes=3) == "3 minutes"
    assert gettext("zh", "interview_duration", minutes=3) == "3 分钟"


def test_unknown_key_falls_back_to_key():
    assert gettext("en", "no_such_key") == "no_such_key"


def test_catalogs_have_the_same_keys():
    en = json.loads((LOCALES_DIR / "en" / "translation.json").read_text(encoding="utf-8"))
    zh = json.loads((LOCALES_DIR / "zh" / "translation.json").read_text(encoding="utf-8"))
    assert set(en) == set(zh)


def test_error_in_chinese(client):
    response = client.get("/api/v1/getUserInfo", headers={"Accept-Language": "zh-CN"})
    assert response.status_code == 401
    assert response.json()["error"] == "访问被拒绝，未提供令牌。"


def test_supported_languages_come_from_locales_dir():
    assert SUPPORTED_LANGUAGES == {"en", "zh"}


def test_unknown_languages_are_not_loaded():
    before = dict(CATALOGS)
    for i in range(50):
        assert resolve_language(f"x{i}-yy") == "en"
    assert CATALOGS == before
    assert gettext("x1", "missing_token") == "Access denied. No token provided."
