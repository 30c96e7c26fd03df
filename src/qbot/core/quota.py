"""Daily question quota.

The quota day is the calendar date in one configured reference timezone.
A stored counter whose ``last_question_date`` is not today counts as zero.
Checking never writes; only ``consume`` persists, and it is called once per
technical answer that was actually produced.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

from qbot.config import QuotaConfig
from qbot.core import templates
from qbot.log import get_logger
from qbot.storage.models import ConversationState, utcnow
from qbot.storage.state_repo import ConversationStateRepository

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class QuotaDecision:
    allowed: bool
    used: int
    limit: int
    message: str | None = None

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used, 0)


class QuotaTracker:
    """Per-user daily counters on top of the conversation state row."""

    def __init__(
        self,
        repo: ConversationStateRepository,
        config: QuotaConfig,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._repo = repo
        self._config = config
        self._tz = ZoneInfo(config.timezone)
        self._clock = clock

    def today(self) -> date:
        return self._clock().astimezone(self._tz).date()

    def is_profile_complete(self, completeness: int) -> bool:
        return completeness >= self._config.completeness_threshold

    def limit_for(self, completeness: int) -> int:
        if self.is_profile_complete(completeness):
            return self._config.complete_profile_limit
        return self._config.incomplete_profile_limit

    def questions_used(self, state: ConversationState) -> int:
        """Today's count, treating a counter from an earlier day as reset."""
        if state.last_question_date != self.today():
            return 0
        return state.daily_question_count

    def check(self, state: ConversationState, completeness: int) -> QuotaDecision:
        used = self.questions_used(state)
        limit = self.limit_for(completeness)
        if used < limit:
            return QuotaDecision(allowed=True, used=used, limit=limit)

        template = (
            templates.QUOTA_COMPLETE_PROFILE
            if self.is_profile_complete(completeness)
            else templates.QUOTA_INCOMPLETE_PROFILE
        )
        logger.info("quota_exhausted", user_key=state.user_key, used=used, limit=limit)
        return QuotaDecision(
            allowed=False,
            used=used,
            limit=limit,
            message=template.format(limit=limit),
        )

    async def consume(self, state: ConversationState) -> ConversationState:
        """Count one answered question and persist it immediately."""
        updated = replace(
            state,
            daily_question_count=self.questions_used(state) + 1,
            last_question_date=self.today(),
            last_activity=self._clock(),
        )
        await self._repo.upsert(updated)
        logger.info(
            "quota_consumed",
            user_key=state.user_key,
            used=updated.daily_question_count,
        )
        return updated
