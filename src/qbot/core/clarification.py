"""A/B clarification sub-dialog for ambiguous technical questions.

When a question could be asking either for a definition or for help with a
fault, the user is asked to pick one. The pending question is stored with
a time-to-live; a bare "A" or "B" reply before it expires resolves it.
Expiry is detected lazily when the next message arrives.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable

from qbot.core import templates
from qbot.core.classifier import technical_subject
from qbot.core.types import Resolution
from qbot.errors import StorageError
from qbot.log import get_logger
from qbot.storage.clarification_repo import ClarificationRepository
from qbot.storage.models import PendingClarification, utcnow

logger = get_logger(__name__)

# "A", "b", "A)", "(b)", "a.", "option B"
_REPLY_PATTERN = re.compile(r"^\(?(?:option\s+)?([ab])\s*[).!]?$")

_RESOLUTIONS = {
    "a": Resolution.THEORY,
    "b": Resolution.TROUBLESHOOTING,
}


def parse_reply(text: str) -> Resolution | None:
    """Map a short A/B reply to a resolution; anything else is ``None``."""
    match = _REPLY_PATTERN.match((text or "").strip().lower())
    return _RESOLUTIONS[match.group(1)] if match else None


@dataclass(frozen=True, slots=True)
class ResolveResult:
    resolved: bool
    original_question: str | None = None
    resolution: Resolution | None = None


class ClarificationManager:
    def __init__(
        self,
        repo: ClarificationRepository,
        ttl: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._repo = repo
        self._ttl = ttl
        self._clock = clock

    async def request_clarification(self, user_key: str, question: str) -> str:
        """Store ``question`` as the user's pending clarification and return the prompt.

        Any earlier pending clarification for the user is overwritten.
        """
        now = self._clock()
        await self._repo.set(
            PendingClarification(
                user_key=user_key,
                original_question=question,
                created_at=now,
                expires_at=now + self._ttl,
            )
        )
        logger.info("clarification_requested", user_key=user_key)
        topic = technical_subject(question) or "this topic"
        return templates.clarification(topic, question)

    async def try_resolve(self, user_key: str, reply_text: str) -> ResolveResult:
        resolution = parse_reply(reply_text)
        if resolution is None:
            return ResolveResult(resolved=False)

        try:
            pending = await self._repo.get(user_key)
        except StorageError as e:
            logger.error("clarification_read_failed", user_key=user_key, error=str(e))
            return ResolveResult(resolved=False)

        if pending is None or not pending.is_open(self._clock()):
            return ResolveResult(resolved=False)

        await self._repo.set(replace(pending, resolution=resolution))
        logger.info("clarification_resolved", user_key=user_key, resolution=resolution.value)
        return ResolveResult(
            resolved=True,
            original_question=pending.original_question,
            resolution=resolution,
        )
