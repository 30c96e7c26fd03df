"""Application wiring - builds all components and manages lifecycle."""

from __future__ import annotations

from datetime import timedelta

from qbot.ai.client import AnthropicClient, LLMClient
from qbot.config import AppConfig
from qbot.core.clarification import ClarificationManager
from qbot.core.orchestrator import Orchestrator
from qbot.core.quota import QuotaTracker
from qbot.core.router import FlowRouter
from qbot.log import get_logger
from qbot.messenger.base import MessengerAdapter
from qbot.storage.clarification_repo import ClarificationRepository
from qbot.storage.database import Database
from qbot.storage.message_log_repo import MessageLogRepository
from qbot.storage.profile_repo import ProfileRepository
from qbot.storage.state_repo import ConversationStateRepository

logger = get_logger(__name__)


class QBotApp:
    """Top-level application object."""

    def __init__(
        self,
        config: AppConfig,
        adapter: MessengerAdapter | None = None,
        llm: LLMClient | None = None,
    ):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.states = ConversationStateRepository(self.db)
        self.profiles = ProfileRepository(self.db)
        self.message_log = MessageLogRepository(self.db)
        self.quota = QuotaTracker(self.states, config.quota)
        self.clarifications = ClarificationManager(
            ClarificationRepository(self.db),
            ttl=timedelta(minutes=config.clarification.ttl_minutes),
        )
        self.adapter = adapter or self._create_adapter()
        self.llm = llm or self._create_llm_client()
        self.orchestrator = Orchestrator(
            adapter=self.adapter,
            llm=self.llm,
            router=FlowRouter(self.quota),
            quota=self.quota,
            clarifications=self.clarifications,
            states=self.states,
            profiles=self.profiles,
            message_log=self.message_log,
            llm_timeout=config.ai.timeout,
            send_timeout=config.transport.send_timeout,
        )

    async def start(self) -> None:
        await self.db.initialize()
        self.adapter.on_message(self.orchestrator.handle)
        await self.adapter.start()
        logger.info(
            "qbot_started",
            platform=self.adapter.platform_name.value,
            model=self.llm.model_name,
        )

    async def stop(self) -> None:
        try:
            await self.adapter.stop()
        except Exception as e:
            logger.error("adapter_stop_error", error=str(e))
        await self.db.close()
        logger.info("qbot_stopped")

    def _create_llm_client(self) -> LLMClient:
        if not self.config.anthropic:
            raise ValueError("No 'anthropic' section in config")
        return AnthropicClient(self.config.anthropic, self.config.ai)

    def _create_adapter(self) -> MessengerAdapter:
        match self.config.transport.platform:
            case "whatsapp":
                from qbot.messenger.wati import WatiAdapter

                return WatiAdapter(self.config.transport)
            case "telegram":
                from qbot.messenger.telegram import TelegramAdapter

                return TelegramAdapter(self.config.transport)
            case _:
                raise ValueError(f"Unknown platform: {self.config.transport.platform}")
