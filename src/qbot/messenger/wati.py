"""WhatsApp adapter for the WATI Business API.

Outbound messages go through WATI's session-message endpoint. Inbound
messages arrive as webhooks on a small FastAPI app served by uvicorn;
each JSON body is handed to ``handle_webhook``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import httpx
import uvicorn

from qbot.config import TransportConfig
from qbot.core.types import Platform
from qbot.errors import TransportError
from qbot.log import get_logger
from qbot.messenger.base import MessengerAdapter
from qbot.messenger.models import IncomingMessage, OutgoingMessage
from qbot.messenger.webhook import create_webhook_app

logger = get_logger(__name__)


def parse_webhook(payload: dict[str, Any]) -> IncomingMessage | None:
    """Turn a WATI webhook body into an ``IncomingMessage``.

    Returns ``None`` for events that are not inbound text messages
    (delivery receipts, template status updates, our own echoes).
    """
    if payload.get("eventType") != "message":
        return None
    if payload.get("owner"):  # message sent by us
        return None
    wa_id = str(payload.get("waId") or "").strip()
    if not wa_id:
        return None

    timestamp = datetime.now(timezone.utc)
    raw_ts = payload.get("timestamp")
    if raw_ts:
        try:
            timestamp = datetime.fromtimestamp(int(raw_ts), tz=timezone.utc)
        except (TypeError, ValueError):
            logger.debug("wati_bad_timestamp", value=raw_ts)

    return IncomingMessage(
        platform=Platform.WHATSAPP,
        chat_id=wa_id,
        user_display_name=payload.get("senderName") or "",
        text=payload.get("text") or "",
        timestamp=timestamp,
        message_id=payload.get("whatsappMessageId") or payload.get("id"),
    )


class WatiAdapter(MessengerAdapter):
    def __init__(self, config: TransportConfig, client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._client = client
        self._server: uvicorn.Server | None = None
        self._server_task: asyncio.Task[None] | None = None

    @property
    def platform_name(self) -> Platform:
        return Platform.WHATSAPP

    async def start(self) -> None:
        if not self.config.token or not self.config.api_endpoint:
            raise ValueError("WATI transport needs both 'token' and 'api_endpoint'")
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_endpoint.rstrip("/"),
                headers={"Authorization": f"Bearer {self.config.token}"},
                timeout=self.config.send_timeout,
            )
        app = create_webhook_app(self, self.config.webhook_path)
        self._server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=self.config.webhook_host,
                port=self.config.webhook_port,
                log_level="warning",
            )
        )
        self._server_task = asyncio.create_task(self._server.serve())
        logger.info(
            "wati_adapter_started",
            endpoint=self.config.api_endpoint,
            webhook=f"{self.config.webhook_host}:{self.config.webhook_port}{self.config.webhook_path}",
        )

    async def stop(self) -> None:
        if self._server and self._server_task:
            self._server.should_exit = True
            await self._server_task
            self._server = None
            self._server_task = None
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("wati_adapter_stopped")

    async def send_message(self, message: OutgoingMessage) -> None:
        if self._client is None:
            raise TransportError("WATI adapter is not started")
        try:
            response = await self._client.post(
                f"/api/v1/sendSessionMessage/{message.chat_id}",
                params={"messageText": message.text},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(f"WATI send to {message.chat_id} failed: {e}") from e

        body = response.json() if response.content else {}
        if isinstance(body, dict) and body.get("result") is False:
            raise TransportError(f"WATI rejected message: {body.get('info') or body}")

    async def handle_webhook(self, payload: dict[str, Any]) -> None:
        """Dispatch one webhook body to the registered message callback."""
        incoming = parse_webhook(payload)
        if incoming is None or self._message_callback is None:
            return
        try:
            await self._message_callback(incoming)
        except Exception as e:
            logger.error("wati_handler_error", error=str(e), chat_id=incoming.chat_id)
