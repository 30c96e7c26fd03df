"""SQLite database connection manager with schema migration."""

from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterator

import aiosqlite

from qbot.errors import StorageError
from qbot.log import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS user_profiles (
    user_key        TEXT PRIMARY KEY,
    full_name       TEXT NOT NULL DEFAULT '',
    rank            TEXT NOT NULL DEFAULT '',
    ship_name       TEXT NOT NULL DEFAULT '',
    company         TEXT NOT NULL DEFAULT '',
    city            TEXT NOT NULL DEFAULT '',
    country         TEXT NOT NULL DEFAULT '',
    whatsapp_number TEXT NOT NULL DEFAULT '',
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now')),
    updated_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now'))
);

CREATE TABLE IF NOT EXISTS conversation_state (
    user_key             TEXT PRIMARY KEY,
    current_flow         TEXT    NOT NULL CHECK(current_flow IN ('conversation','technical','onboarding')),
    current_step         TEXT    NOT NULL DEFAULT 'idle',
    step_data_json       TEXT    NOT NULL DEFAULT '{}',
    daily_question_count INTEGER NOT NULL DEFAULT 0,
    last_question_date   TEXT,
    last_activity        TEXT,
    updated_at           TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f','now'))
);

CREATE TABLE IF NOT EXISTS pending_clarifications (
    user_key          TEXT PRIMARY KEY,
    original_question TEXT NOT NULL,
    created_at        TEXT NOT NULL,
    expires_at        TEXT NOT NULL,
    resolution        TEXT CHECK(resolution IS NULL OR resolution IN ('theory','troubleshooting'))
);

CREATE TABLE IF NOT EXISTS message_log (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    user_key        TEXT NOT NULL,
    direction       TEXT NOT NULL CHECK(direction IN ('inbound','outbound')),
    text            TEXT NOT NULL,
    classification  TEXT,
    created_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_message_log_user
    ON message_log(user_key, created_at);
"""


class Database:
    """Async SQLite database manager."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open connection and run migrations."""
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self._db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._conn.execute("PRAGMA journal_mode=WAL")
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()
        logger.info("database_initialized", path=self._db_path)

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._conn

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.info("database_closed")


@contextlib.contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors inside the block as ``StorageError``."""
    try:
        yield
    except aiosqlite.Error as e:
        raise StorageError(operation, str(e)) from e
