"""Append-only audit log of inbound and outbound messages."""

from __future__ import annotations

from datetime import datetime

from qbot.core.types import Direction
from qbot.storage.database import Database, storage_errors
from qbot.storage.models import MessageLogEntry


class MessageLogRepository:
    """Entries are only ever appended; nothing here updates or deletes."""

    def __init__(self, db: Database):
        self._db = db

    async def append(self, entry: MessageLogEntry) -> int:
        """Append an entry and return its ID."""
        with storage_errors("log.append"):
            cursor = await self._db.conn.execute(
                """INSERT INTO message_log (user_key, direction, text, classification, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    entry.user_key,
                    entry.direction.value,
                    entry.text,
                    entry.classification,
                    entry.timestamp.isoformat(),
                ),
            )
            await self._db.conn.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    async def recent(self, user_key: str, limit: int = 20) -> list[MessageLogEntry]:
        """Most recent entries for a user, oldest first."""
        with storage_errors("log.recent"):
            cursor = await self._db.conn.execute(
                """SELECT * FROM message_log
                   WHERE user_key = ?
                   ORDER BY id DESC
                   LIMIT ?""",
                (user_key, limit),
            )
            rows = await cursor.fetchall()
        return [
            MessageLogEntry(
                id=row["id"],
                user_key=row["user_key"],
                direction=Direction(row["direction"]),
                text=row["text"],
                classification=row["classification"],
                timestamp=datetime.fromisoformat(row["created_at"]),
            )
            for row in reversed(rows)
        ]
