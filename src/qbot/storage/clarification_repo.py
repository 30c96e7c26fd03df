"""Pending clarification repository: at most one row per user key."""

from __future__ import annotations

from datetime import datetime

from qbot.core.types import Resolution
from qbot.storage.database import Database, storage_errors
from qbot.storage.models import PendingClarification


class ClarificationRepository:
    def __init__(self, db: Database):
        self._db = db

    async def get(self, user_key: str) -> PendingClarification | None:
        with storage_errors("clarification.get"):
            cursor = await self._db.conn.execute(
                "SELECT * FROM pending_clarifications WHERE user_key = ?",
                (user_key,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return PendingClarification(
            user_key=row["user_key"],
            original_question=row["original_question"],
            created_at=datetime.fromisoformat(row["created_at"]),
            expires_at=datetime.fromisoformat(row["expires_at"]),
            resolution=Resolution(row["resolution"]) if row["resolution"] else None,
        )

    async def set(self, clarification: PendingClarification) -> None:
        """Store ``clarification``, replacing whatever the user had before."""
        with storage_errors("clarification.set"):
            await self._db.conn.execute(
                """INSERT OR REPLACE INTO pending_clarifications
                   (user_key, original_question, created_at, expires_at, resolution)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    clarification.user_key,
                    clarification.original_question,
                    clarification.created_at.isoformat(),
                    clarification.expires_at.isoformat(),
                    clarification.resolution.value if clarification.resolution else None,
                ),
            )
            await self._db.conn.commit()

    async def clear(self, user_key: str) -> None:
        with storage_errors("clarification.clear"):
            await self._db.conn.execute(
                "DELETE FROM pending_clarifications WHERE user_key = ?",
                (user_key,),
            )
            await self._db.conn.commit()
