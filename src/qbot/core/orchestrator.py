"""Orchestrator: entry point for every inbound message.

One message is processed end to end (gate, classify, route, answer, persist,
log) while holding that user's lock, so two messages from the same user
never interleave. Messages from different users run concurrently.

Every failure ends in a best-effort reply to the user and a log event;
nothing raised while handling a message reaches the transport.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from datetime import datetime
from typing import Awaitable, Callable, TypeVar

from qbot.ai.client import LLMClient
from qbot.core import onboarding, templates
from qbot.core.clarification import ClarificationManager
from qbot.core.classifier import classify
from qbot.core.locks import KeyedLock
from qbot.core.quota import QuotaTracker
from qbot.core.router import Action, FlowRouter
from qbot.core.types import ActionKind, Direction
from qbot.errors import StorageError
from qbot.log import get_logger, user_context
from qbot.messenger.base import MessengerAdapter
from qbot.messenger.models import IncomingMessage, OutgoingMessage
from qbot.storage.message_log_repo import MessageLogRepository
from qbot.storage.models import ConversationState, MessageLogEntry, utcnow
from qbot.storage.profile_repo import ProfileRepository
from qbot.storage.state_repo import ConversationStateRepository

logger = get_logger(__name__)

T = TypeVar("T")


class Orchestrator:
    def __init__(
        self,
        *,
        adapter: MessengerAdapter,
        llm: LLMClient,
        router: FlowRouter,
        quota: QuotaTracker,
        clarifications: ClarificationManager,
        states: ConversationStateRepository,
        profiles: ProfileRepository,
        message_log: MessageLogRepository,
        llm_timeout: float = 30.0,
        send_timeout: float = 15.0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._adapter = adapter
        self._llm = llm
        self._router = router
        self._quota = quota
        self._clarifications = clarifications
        self._states = states
        self._profiles = profiles
        self._log = message_log
        self._llm_timeout = llm_timeout
        self._send_timeout = send_timeout
        self._clock = clock
        self._locks = KeyedLock()

    async def handle(self, message: IncomingMessage) -> None:
        """Messenger callback."""
        await self.on_message(message.chat_id, message.text, message.user_display_name)

    async def on_message(self, user_key: str, text: str, display_name: str | None = None) -> None:
        with user_context(user_key):
            async with self._locks.hold(user_key):
                started = time.monotonic()
                try:
                    await self._process(user_key, text or "", display_name)
                except StorageError as e:
                    logger.error("storage_write_failed", operation=e.operation, error=str(e))
                    await self._send(user_key, templates.STORAGE_FAILURE)
                except Exception:
                    logger.exception("message_processing_failed")
                    await self._send(user_key, templates.CRITICAL_ERROR)
                logger.debug(
                    "message_processed",
                    elapsed_ms=round((time.monotonic() - started) * 1000),
                )

    async def _process(self, user_key: str, text: str, display_name: str | None) -> None:
        logger.info("message_received", length=len(text))
        if not text.strip():
            await self._reply(user_key, templates.EMPTY_MESSAGE, "empty_message")
            return

        now = self._clock()
        profile = await self._read("profile", self._profiles.get(user_key))
        state = await self._read("state", self._states.get(user_key))
        if state is None:
            state = ConversationState(user_key=user_key)

        # Unknown users are onboarded before anything else is looked at.
        if profile is None:
            await self._onboard(state, text, display_name, now)
            return

        result = await self._clarifications.try_resolve(user_key, text)
        if result.resolved:
            action = self._router.route_resolved(result, profile, state)
            label = f"clarification_{result.resolution}"
        else:
            classification = classify(text)
            action = self._router.route(text, classification, profile, state)
            label = classification.type.value
        logger.info("message_routed", classification=label, action=action.kind.value)

        await self._append_log(user_key, Direction.INBOUND, text, label)
        state = replace(state, current_flow=action.flow, last_activity=now)
        await self._execute(action, state, label)

    async def _onboard(
        self,
        state: ConversationState,
        text: str,
        display_name: str | None,
        now: datetime,
    ) -> None:
        outcome = onboarding.advance(state, text, now, display_name)
        await self._append_log(state.user_key, Direction.INBOUND, text, "onboarding")
        if outcome.completed:
            await self._profiles.upsert(outcome.profile)
            logger.info("onboarding_completed")
        await self._states.upsert(outcome.state)
        logger.info("onboarding_step", step=outcome.state.current_step)
        await self._reply(state.user_key, outcome.reply, "onboarding")

    async def _execute(
        self,
        action: Action,
        state: ConversationState,
        label: str,
    ) -> None:
        user_key = state.user_key
        match action.kind:
            case ActionKind.EMERGENCY:
                # Reply before any write so a storage fault cannot delay it.
                await self._reply(user_key, action.text, "emergency_reply")
                logger.critical("emergency_message", text=action.question)
                # Safety reply already sent: a failed write is only logged.
                try:
                    await self._states.upsert(state)
                except StorageError as e:
                    logger.error("storage_write_failed", operation=e.operation, error=str(e))
            case ActionKind.REQUEST_CLARIFICATION:
                prompt = await self._clarifications.request_clarification(user_key, action.question)
                await self._states.upsert(state)
                await self._reply(user_key, prompt, "clarification_request")
            case ActionKind.TECHNICAL_ANSWER:
                await self._answer(action, state)
            case ActionKind.DENY_QUOTA:
                await self._states.upsert(state)
                await self._reply(user_key, action.text, "quota_denied")
            case ActionKind.SEND_REPLY:
                await self._states.upsert(state)
                await self._reply(user_key, action.text, f"{label}_reply")

    async def _answer(self, action: Action, state: ConversationState) -> None:
        user_key = state.user_key
        await self._typing(user_key)
        try:
            answer = await asyncio.wait_for(
                self._llm.complete(action.prompt, action.question),
                timeout=self._llm_timeout,
            )
            if not answer or not answer.strip():
                raise ValueError("empty answer")
        except Exception as e:
            # Failed attempts are free: quota is not consumed.
            logger.warning(
                "llm_failed",
                error=str(e) or type(e).__name__,
                resolution=str(action.resolution),
            )
            await self._states.upsert(state)
            await self._reply(user_key, templates.LLM_FALLBACK, "llm_fallback")
            return

        # consume -> send -> log; a failed send does not refund the question.
        await self._quota.consume(state)
        await self._reply(user_key, answer.strip(), "ai_technical_response")
        logger.info("technical_answer_sent", resolution=str(action.resolution))

    async def _reply(self, user_key: str, text: str, label: str) -> None:
        delivered = await self._send(user_key, text)
        await self._append_log(
            user_key,
            Direction.OUTBOUND,
            text,
            label if delivered else f"{label}_undelivered",
        )

    async def _send(self, user_key: str, text: str) -> bool:
        try:
            await asyncio.wait_for(
                self._adapter.send_message(OutgoingMessage(chat_id=user_key, text=text)),
                timeout=self._send_timeout,
            )
        except Exception as e:
            logger.error("send_failed", error=str(e) or type(e).__name__)
            return False
        return True

    async def _typing(self, user_key: str) -> None:
        try:
            await self._adapter.send_typing_indicator(user_key)
        except Exception as e:
            logger.debug("typing_indicator_failed", error=str(e))

    async def _append_log(
        self,
        user_key: str,
        direction: Direction,
        text: str,
        classification: str | None,
    ) -> None:
        """Audit log writes are independent of the reply; a failure is only logged."""
        try:
            await self._log.append(
                MessageLogEntry(
                    user_key=user_key,
                    direction=direction,
                    text=text,
                    classification=classification,
                    timestamp=self._clock(),
                )
            )
        except StorageError as e:
            logger.error("message_log_failed", direction=direction.value, error=str(e))

    async def _read(self, what: str, op: Awaitable[T]) -> T | None:
        """Reads that fail are treated as 'nothing stored'."""
        try:
            return await op
        except StorageError as e:
            logger.error("storage_read_failed", what=what, error=str(e))
            return None
