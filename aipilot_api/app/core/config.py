"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from environment
variables.  A ``.env`` file in the working directory is loaded first
so that local development does not require exporting every variable.
Defaults are provided for all fields; secrets default to placeholders
and must be overridden in production.
"""

import json
import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

load_dotenv()


# Credits granted per Stripe price.  Overridable with a JSON object in
# the PRICE_CREDITS environment variable.
DEFAULT_PRICE_CREDITS = {
    "price_1QATNvRr4aL1KjAOIPYp5Yxo": 200,  # 59.99
    "price_1QATNwRr4aL1KjAOO004muQj": 600,  # 149.99
    "price_1QATNvRr4aL1KjAORDMMLWHg": 2400,  # 419.99
}


def _load_price_credits() -> Dict[str, int]:
    raw = os.getenv("PRICE_CREDITS")
    if not raw:
        return dict(DEFAULT_PRICE_CREDITS)
    return {str(k): int(v) for k, v in json.loads(raw).items()}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "AiPilot API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Access and refresh tokens are signed with separate secrets so that
    # a refresh token can never be replayed as an access token.
    jwt_secret: str = os.getenv("JWT_SECRET", "change_me")
    refresh_secret: str = os.getenv("REFRESH_SECRET", "change_me_too")
    access_token_expire_seconds: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_SECONDS", str(60 * 60)))
    refresh_token_expire_seconds: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_SECONDS", str(7 * 24 * 60 * 60)))

    # GENERAL_API_RATE_LIMIT: at most ``rate_limit_max`` requests per
    # user, method and URL within ``rate_limit_window_seconds``.
    rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "100"))
    rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    # Path or connection string for the SQLite database.  Relative paths
    # are resolved against the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "aipilot.db")

    initial_credits: int = int(os.getenv("INITIAL_CREDITS", "30"))

    # Interview monitor.  An ongoing interview is ended once its elapsed
    # seconds exceed ``credits * seconds_per_credit`` of its owner.
    interview_monitor_enabled: bool = os.getenv("INTERVIEW_MONITOR_ENABLED", "true").lower() in {"1", "true", "yes"}
    interview_monitor_interval_seconds: int = int(os.getenv("INTERVIEW_MONITOR_INTERVAL_SECONDS", "3600"))
    seconds_per_credit: int = int(os.getenv("SECONDS_PER_CREDIT", "1"))

    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_chat_model: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo")
    openai_max_tokens: int = int(os.getenv("OPENAI_MAX_TOKENS", "300"))
    openai_tts_model: str = os.getenv("OPENAI_TTS_MODEL", "tts-1")
    openai_tts_voice: str = os.getenv("OPENAI_TTS_VOICE", "nova")

    stripe_secret_key: str = os.getenv("STRIPE_SECRET_KEY", "")
    stripe_api_version: str = os.getenv("STRIPE_API_VERSION", "2024-09-30.acacia")
    price_credits: Dict[str, int] = field(default_factory=_load_price_credits)

    # Outgoing mail for verification codes.  Sending is skipped when the
    # host or user is empty.
    email_host: str = os.getenv("EMAIL_HOST", "smtphz.qiye.163.com")
    email_port: int = int(os.getenv("EMAIL_PORT", "465"))
    email_user: str = os.getenv("EMAIL_USER", "")
    email_pass: str = os.getenv("EMAIL_PASS", "")
    email_timeout_seconds: int = int(os.getenv("EMAIL_TIMEOUT_SECONDS", "20"))
    verify_email_base_url: str = os.getenv("VERIFY_EMAIL_BASE_URL", "http://aiia.cc/verify-email")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
