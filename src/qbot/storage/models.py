"""Data models for storage layer."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from typing import Any, Optional

from qbot.core.types import Direction, Flow, Resolution

IDLE_STEP = "idle"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ConversationState:
    """Per-user conversation position and daily question counter."""

    user_key: str
    current_flow: Flow = Flow.CONVERSATION
    current_step: str = IDLE_STEP
    step_data: dict[str, Any] = field(default_factory=dict)
    daily_question_count: int = 0
    last_question_date: Optional[date] = None
    last_activity: Optional[datetime] = None


@dataclass
class PendingClarification:
    user_key: str
    original_question: str
    created_at: datetime
    expires_at: datetime
    resolution: Optional[Resolution] = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_open(self, now: datetime) -> bool:
        """Unresolved and still inside its time-to-live."""
        return self.resolution is None and not self.is_expired(now)


@dataclass
class MessageLogEntry:
    user_key: str
    direction: Direction
    text: str
    classification: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)
    id: Optional[int] = None


@dataclass
class UserProfile:
    user_key: str
    full_name: str = ""
    rank: str = ""
    ship_name: str = ""
    company: str = ""
    city: str = ""
    country: str = ""
    whatsapp_number: str = ""

    def completeness_percent(self) -> int:
        """Share of non-empty profile fields, rounded to a whole percent."""
        values = [getattr(self, f.name) for f in fields(self) if f.name != "user_key"]
        filled = sum(1 for value in values if value and value.strip())
        return round(filled * 100 / len(values))

    def missing_fields(self) -> list[str]:
        return [
            f.name
            for f in fields(self)
            if f.name != "user_key" and not (getattr(self, f.name) or "").strip()
        ]

    @property
    def first_name(self) -> str:
        return self.full_name.split()[0] if self.full_name.strip() else ""
