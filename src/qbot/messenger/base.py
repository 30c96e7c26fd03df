"""Transport interface between a chat platform and the orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from qbot.config import TransportConfig
from qbot.core.types import Platform
from qbot.messenger.models import IncomingMessage, OutgoingMessage

MessageCallback = Callable[[IncomingMessage], Awaitable[None]]


class MessengerAdapter(ABC):
    """One chat platform: delivers inbound text, sends plain-text replies.

    ``chat_id`` is the user key everywhere: the WhatsApp number for WATI,
    the chat id for Telegram. Adapters hand each inbound message to the
    registered callback and must not let callback errors escape into the
    platform's own event loop or webhook handler.
    """

    def __init__(self, config: TransportConfig):
        self.config = config
        self._message_callback: MessageCallback | None = None

    @property
    @abstractmethod
    def platform_name(self) -> Platform:
        ...

    @abstractmethod
    async def start(self) -> None:
        """Open connections and begin delivering inbound messages."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def send_message(self, message: OutgoingMessage) -> None:
        """Deliver one reply. Raises ``TransportError`` if it cannot.

        No timeout is applied here; the orchestrator bounds each send.
        """
        ...

    async def send_typing_indicator(self, chat_id: str) -> None:
        """Optional. WATI has no session typing indicator, so the default does nothing."""

    def on_message(self, callback: MessageCallback) -> None:
        self._message_callback = callback
