"""
SQLite storage and a simple migration system.

Users, interviews and orders are stored as rows keyed by UUID strings,
mirroring the document ids the clients already hold.  ``get_connection``
returns a connection with a row factory, ``get_cursor`` wraps one in a
commit-and-close context manager and ``init_db`` applies pending
migrations on startup.

Credit changes and order completion are single conditional UPDATE
statements, so concurrent requests cannot double-spend or double-grant.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings

logger = logging.getLogger(__name__)


PACKAGE_DIR = Path(__file__).resolve().parents[2]  # aipilot_api/


def get_database_path() -> str:
    """Absolute path of the SQLite file named by ``DATABASE_URL``.

    Relative names live next to the ``aipilot_api`` package so the API
    and ``check_interviews.py`` agree regardless of the working directory.
    """
    configured = Path(settings.database_url).expanduser()
    if configured.is_absolute():
        return str(configured)
    return str((PACKAGE_DIR / configured).resolve())


def get_connection() -> sqlite3.Connection:
    """Open a connection with name-addressable rows and enforced foreign keys.

    Timestamps are stored as ISO-8601 strings and parsed by the
    services, so no type detection is enabled here.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor; commit if the block succeeds, always close."""
    connection = get_connection()
    try:
        yield connection.cursor()
        connection.commit()
    finally:
        connection.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users, interviews and checkout orders
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            credits INTEGER NOT NULL DEFAULT 0,
            verification_code TEXT,
            is_verified INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS interviews (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            position_name TEXT NOT NULL,
            resume_url TEXT NOT NULL,
            start_time TEXT NOT NULL,
            end_time TEXT,
            duration INTEGER,
            state INTEGER NOT NULL DEFAULT 1,
            FOREIGN KEY(user_id) REFERENCES users(id)
        );

        CREATE TABLE IF NOT EXISTS orders (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            amount INTEGER,
            currency TEXT,
            status TEXT NOT NULL DEFAULT 'pending',
            stripe_session_id TEXT NOT NULL,
            price_id TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id)
        );
        """,
    ),
    # Migration 2: lookups used by every request and by the monitor scan
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_interviews_user_state ON interviews(user_id, state);
        CREATE INDEX IF NOT EXISTS idx_interviews_state ON interviews(state);
        CREATE UNIQUE INDEX IF NOT EXISTS idx_orders_session ON orders(stripe_session_id);
        """,
    ),
    # Migration 3: at most one ongoing interview per user
    (
        3,
        """
        CREATE UNIQUE INDEX IF NOT EXISTS idx_interviews_one_ongoing ON interviews(user_id) WHERE state = 1;
        """,
    ),
]


def _schema_version(cursor: sqlite3.Cursor) -> int:
    row = cursor.execute("SELECT COALESCE(MAX(version), 0) AS version FROM migrations").fetchone()
    return row["version"]


def init_db() -> None:
    """Bring the schema up to the newest entry of ``MIGRATIONS``.

    Applied versions are recorded in the ``migrations`` table, so the
    call is cheap once the database is current and safe to repeat on
    every startup.  Append new migrations with the next version number;
    never edit one that has shipped.
    """
    with get_cursor() as cursor:
        cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
        applied = _schema_version(cursor)
        for version, script in MIGRATIONS:
            if version <= applied:
                continue
            cursor.executescript(script)
            cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
            logger.info("Applied database migration %s", version)
