"""
Business logic for users.

Users register with an e-mail address as ``username`` and a password.
Every new account starts with ``settings.initial_credits`` credits and
an unverified e-mail address; the verification code is mailed by
``EmailService`` and checked by ``verify_email``.
"""

import logging
import secrets
import sqlite3
import string
import uuid
from typing import Optional

from ..core.config import settings
from ..core.db import get_connection
from ..core.security import hash_password, verify_password
from ..schemas.user import UserRecord
from .exceptions import UserNotFoundError, UsernameTakenError

logger = logging.getLogger(__name__)

VERIFICATION_CODE_ALPHABET = string.ascii_uppercase + string.digits
VERIFICATION_CODE_LENGTH = 6

_USER_COLUMNS = "id, username, password, credits, verification_code, is_verified, created_at"


def _row_to_user(row: sqlite3.Row) -> UserRecord:
    return UserRecord(
        id=row["id"],
        username=row["username"],
        password=row["password"],
        credits=row["credits"],
        verification_code=row["verification_code"],
        is_verified=bool(row["is_verified"]),
        created_at=row["created_at"],
    )


class UserService:
    """User accounts and credit balances."""

    @staticmethod
    def generate_verification_code() -> str:
        return "".join(secrets.choice(VERIFICATION_CODE_ALPHABET) for _ in range(VERIFICATION_CODE_LENGTH))

    @classmethod
    async def create_user(cls, username: str, password: str) -> UserRecord:
        """Create a user with the initial credit balance.

        Raises ``UsernameTakenError`` if the username is already
        registered (including a concurrent registration that wins the
        UNIQUE constraint).
        """
        user = UserRecord(
            id=str(uuid.uuid4()),
            username=username,
            password=hash_password(password),
            credits=settings.initial_credits,
            verification_code=cls.generate_verification_code(),
            is_verified=False,
        )
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO users (id, username, password, credits, verification_code, is_verified) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (user.id, user.username, user.password, user.credits, user.verification_code, 0),
            )
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise UsernameTakenError(username) from e
        finally:
            conn.close()
        logger.info("Registered user %s (%s)", user.id, username)
        return user

    @classmethod
    async def get_user_by_username(cls, username: str) -> Optional[UserRecord]:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?",
                (username,),
            ).fetchone()
            return _row_to_user(row) if row else None
        finally:
            conn.close()

    @classmethod
    async def get_user_by_id(cls, user_id: str) -> Optional[UserRecord]:
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
            return _row_to_user(row) if row else None
        finally:
            conn.close()

    @staticmethod
    def validate_password(user: UserRecord, password: str) -> bool:
        return verify_password(password, user.password)

    @classmethod
    async def authenticate(cls, username: str, password: str) -> Optional[UserRecord]:
        """Return the user if the credentials match, otherwise ``None``."""
        user = await cls.get_user_by_username(username)
        if not user or not cls.validate_password(user, password):
            return None
        return user

    @classmethod
    async def _update_credits(cls, user_id: str, sql: str, params: tuple) -> UserRecord:
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(sql, params)
            if cursor.rowcount == 0:
                raise UserNotFoundError(user_id)
            conn.commit()
            row = cursor.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
            return _row_to_user(row)
        finally:
            conn.close()

    @classmethod
    async def reduce_user_credits(cls, user_id: str, credits_to_deduct: int) -> UserRecord:
        """Deduct credits, never going below zero."""
        user = await cls._update_credits(
            user_id,
            "UPDATE users SET credits = MAX(0, credits - ?) WHERE id = ?",
            (credits_to_deduct, user_id),
        )
        logger.info("Deducted %s credits from user %s, %s left", credits_to_deduct, user_id, user.credits)
        return user

    @classmethod
    async def reset_user_credits(cls, user_id: str) -> UserRecord:
        user = await cls._update_credits(user_id, "UPDATE users SET credits = 0 WHERE id = ?", (user_id,))
        logger.info("Credits of user %s reset to 0", user_id)
        return user

    @classmethod
    async def verify_email(cls, username: str, code: str) -> bool:
        """Mark the user verified if ``code`` matches.

        Raises ``UserNotFoundError`` for an unknown username; returns
        ``False`` when the code does not match.
        """
        user = await cls.get_user_by_username(username)
        if not user:
            raise UserNotFoundError(username)
        if not user.verification_code or not secrets.compare_digest(
            user.verification_code.encode("utf-8"), code.strip().upper().encode("utf-8")
        ):
            return False
        conn = get_connection()
        try:
            conn.execute("UPDATE users SET is_verified = 1 WHERE id = ?", (user.id,))
            conn.commit()
        finally:
            conn.close()
        logger.info("User %s verified their e-mail", user.id)
        return True
