"""Conversation state repository: one upserted row per user key."""

from __future__ import annotations

import json
from datetime import date, datetime

from qbot.core.types import Flow
from qbot.log import get_logger
from qbot.storage.database import Database, storage_errors
from qbot.storage.models import ConversationState

logger = get_logger(__name__)


class ConversationStateRepository:
    """Reads and upserts ``ConversationState`` rows. Rows are never deleted."""

    def __init__(self, db: Database):
        self._db = db

    async def get(self, user_key: str) -> ConversationState | None:
        with storage_errors("state.get"):
            cursor = await self._db.conn.execute(
                "SELECT * FROM conversation_state WHERE user_key = ?",
                (user_key,),
            )
            row = await cursor.fetchone()
        return self._row_to_state(row) if row else None

    async def upsert(self, state: ConversationState) -> None:
        """Insert the state or overwrite every column of the existing row."""
        with storage_errors("state.upsert"):
            await self._db.conn.execute(
                """INSERT INTO conversation_state
                   (user_key, current_flow, current_step, step_data_json,
                    daily_question_count, last_question_date, last_activity)
                   VALUES (?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(user_key) DO UPDATE SET
                       current_flow = excluded.current_flow,
                       current_step = excluded.current_step,
                       step_data_json = excluded.step_data_json,
                       daily_question_count = excluded.daily_question_count,
                       last_question_date = excluded.last_question_date,
                       last_activity = excluded.last_activity,
                       updated_at = strftime('%Y-%m-%dT%H:%M:%f','now')""",
                (
                    state.user_key,
                    state.current_flow.value,
                    state.current_step,
                    json.dumps(state.step_data, ensure_ascii=False),
                    state.daily_question_count,
                    state.last_question_date.isoformat() if state.last_question_date else None,
                    state.last_activity.isoformat() if state.last_activity else None,
                ),
            )
            await self._db.conn.commit()
        logger.debug(
            "state_saved",
            user_key=state.user_key,
            flow=state.current_flow.value,
            step=state.current_step,
        )

    @staticmethod
    def _row_to_state(row) -> ConversationState:
        return ConversationState(
            user_key=row["user_key"],
            current_flow=Flow(row["current_flow"]),
            current_step=row["current_step"],
            step_data=json.loads(row["step_data_json"]),
            daily_question_count=row["daily_question_count"],
            last_question_date=(
                date.fromisoformat(row["last_question_date"]) if row["last_question_date"] else None
            ),
            last_activity=(
                datetime.fromisoformat(row["last_activity"]) if row["last_activity"] else None
            ),
        )
