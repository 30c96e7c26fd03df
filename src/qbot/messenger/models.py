"""Unified message models for all messenger platforms."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from qbot.core.types import Platform


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    platform: Platform
    chat_id: str  # stable user key: WhatsApp number or Telegram chat id
    user_display_name: str
    text: str
    timestamp: datetime
    message_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class OutgoingMessage:
    chat_id: str
    text: str
