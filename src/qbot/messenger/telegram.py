"""Telegram messenger adapter using python-telegram-bot v21+.

Useful for running the bot without a WhatsApp Business account: the chat
id plays the role of the user key.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from telegram import Update
from telegram.constants import ChatAction
from telegram.error import TelegramError
from telegram.ext import Application, MessageHandler as TGMessageHandler, filters

from qbot.config import TransportConfig
from qbot.core.types import Platform
from qbot.errors import TransportError
from qbot.log import get_logger
from qbot.messenger.base import MessengerAdapter
from qbot.messenger.models import IncomingMessage, OutgoingMessage

logger = get_logger(__name__)


class TelegramAdapter(MessengerAdapter):
    def __init__(self, config: TransportConfig):
        super().__init__(config)
        self._app: Application | None = None  # type: ignore[type-arg]

    @property
    def platform_name(self) -> Platform:
        return Platform.TELEGRAM

    async def start(self) -> None:
        if not self.config.token:
            raise ValueError("Telegram bot token not configured")

        self._app = Application.builder().token(self.config.token).build()
        # Commands such as /help are plain text to the classifier.
        self._app.add_handler(TGMessageHandler(filters.TEXT, self._on_telegram_message))

        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling(drop_pending_updates=True)  # type: ignore[union-attr]
        logger.info("telegram_adapter_started")

    async def stop(self) -> None:
        if self._app:
            await self._app.updater.stop()  # type: ignore[union-attr]
            await self._app.stop()
            await self._app.shutdown()
            self._app = None
            logger.info("telegram_adapter_stopped")

    async def send_message(self, message: OutgoingMessage) -> None:
        if not self._app or not self._app.bot:
            raise TransportError("Telegram adapter is not started")
        try:
            await self._app.bot.send_message(chat_id=int(message.chat_id), text=message.text)
        except TelegramError as e:
            raise TransportError(f"Telegram send to {message.chat_id} failed: {e}") from e

    async def send_typing_indicator(self, chat_id: str) -> None:
        if self._app and self._app.bot:
            await self._app.bot.send_chat_action(chat_id=int(chat_id), action=ChatAction.TYPING)

    async def _on_telegram_message(self, update: Update, context: Any) -> None:
        if not update.message or not self._message_callback:
            return

        msg = update.message
        incoming = IncomingMessage(
            platform=Platform.TELEGRAM,
            chat_id=str(msg.chat_id),
            user_display_name=msg.from_user.full_name if msg.from_user else "",
            text=msg.text or "",
            timestamp=msg.date or datetime.now(timezone.utc),
            message_id=str(msg.message_id),
        )

        try:
            await self._message_callback(incoming)
        except Exception as e:
            logger.error("telegram_handler_error", error=str(e), chat_id=incoming.chat_id)
