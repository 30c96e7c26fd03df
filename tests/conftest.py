"""Shared fixtures: temporary database, fakes for the transport and the model."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from qbot.ai.client import LLMClient
from qbot.config import QuotaConfig, TransportConfig
from qbot.core.clarification import ClarificationManager
from qbot.core.orchestrator import Orchestrator
from qbot.core.quota import QuotaTracker
from qbot.core.router import FlowRouter
from qbot.core.types import Platform
from qbot.errors import LLMError, TransportError
from qbot.messenger.base import MessengerAdapter
from qbot.messenger.models import OutgoingMessage
from qbot.storage.clarification_repo import ClarificationRepository
from qbot.storage.database import Database
from qbot.storage.message_log_repo import MessageLogRepository
from qbot.storage.models import UserProfile
from qbot.storage.profile_repo import ProfileRepository
from qbot.storage.state_repo import ConversationStateRepository

USER = "919876543210"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeLLM(LLMClient):
    def __init__(self) -> None:
        self.answer = "A turbocharger uses exhaust gas energy to compress intake air."
        self.error: Exception | None = None
        self.delay = 0.0
        self.calls: list[tuple[str, str]] = []

    @property
    def model_name(self) -> str:
        return "fake-model"

    async def complete(self, prompt_template: str, user_text: str) -> str:
        self.calls.append((prompt_template, user_text))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeAdapter(MessengerAdapter):
    def __init__(self) -> None:
        super().__init__(TransportConfig())
        self.sent: list[OutgoingMessage] = []
        self.fail = False
        self.delay = 0.0

    @property
    def platform_name(self) -> Platform:
        return Platform.WHATSAPP

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def send_message(self, message: OutgoingMessage) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise TransportError("recipient unreachable")
        self.sent.append(message)

    def texts(self, chat_id: str = USER) -> list[str]:
        return [m.text for m in self.sent if m.chat_id == chat_id]


@pytest.fixture
def clock():
    # 11:30 in Asia/Kolkata
    return FakeClock(datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "qbot.db"))
    await database.initialize()
    yield database
    await database.close()


@pytest.fixture
def states(db):
    return ConversationStateRepository(db)


@pytest.fixture
def profiles(db):
    return ProfileRepository(db)


@pytest.fixture
def message_log(db):
    return MessageLogRepository(db)


@pytest.fixture
def clarification_repo(db):
    return ClarificationRepository(db)


@pytest.fixture
def quota(states, clock):
    return QuotaTracker(states, QuotaConfig(timezone="Asia/Kolkata"), clock=clock)


@pytest.fixture
def clarifications(clarification_repo, clock):
    return ClarificationManager(clarification_repo, ttl=timedelta(minutes=10), clock=clock)


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def orchestrator(adapter, llm, quota, clarifications, states, profiles, message_log, clock):
    return Orchestrator(
        adapter=adapter,
        llm=llm,
        router=FlowRouter(quota),
        quota=quota,
        clarifications=clarifications,
        states=states,
        profiles=profiles,
        message_log=message_log,
        llm_timeout=0.5,
        send_timeout=0.5,
        clock=clock,
    )


def complete_profile(user_key: str = USER) -> UserProfile:
    return UserProfile(
        user_key=user_key,
        full_name="Krish Kapoor",
        rank="Chief Engineer",
        ship_name="MV Ocean Star",
        company="Oceanic Shipping",
        whatsapp_number=user_key,
    )


def incomplete_profile(user_key: str = USER) -> UserProfile:
    return UserProfile(user_key=user_key, full_name="Krish Kapoor", whatsapp_number=user_key)


@pytest.fixture
def llm_error():
    return LLMError("upstream unavailable")
