"""HTTP listener for WATI webhooks (FastAPI)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request

from qbot.log import get_logger

if TYPE_CHECKING:
    from qbot.messenger.wati import WatiAdapter

logger = get_logger(__name__)


def create_webhook_app(adapter: WatiAdapter, path: str = "/webhooks/wati") -> FastAPI:
    """Build the app that feeds webhook bodies into ``adapter``.

    The webhook is acknowledged immediately; the message is processed as a
    background task so slow language-model calls never make WATI retry.
    """
    app = FastAPI(title="qbot webhook", docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(path)
    async def wati_webhook(request: Request, background: BackgroundTasks) -> dict[str, bool]:
        try:
            payload: Any = await request.json()
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Body is not JSON") from e
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Expected a JSON object")

        logger.debug("wati_webhook_received", event_type=payload.get("eventType"))
        background.add_task(adapter.handle_webhook, payload)
        return {"ok": True}

    return app
