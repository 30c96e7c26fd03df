"""Flow router: decides what to do with one classified message.

Routing is a pure decision. The router reads the user's state, profile and
the quota policy, and returns an ``Action``; sending, persisting and
calling the language model are left to the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from qbot.ai.prompts import prompt_for
from qbot.core import lexicons, templates
from qbot.core.classifier import Classification, is_definition_style
from qbot.core.clarification import ResolveResult
from qbot.core.quota import QuotaTracker
from qbot.core.types import ActionKind, Flow, MessageType, Resolution
from qbot.storage.models import ConversationState, UserProfile


@dataclass(frozen=True, slots=True)
class Action:
    kind: ActionKind
    flow: Flow = Flow.CONVERSATION
    text: str = ""
    question: str = ""
    resolution: Optional[Resolution] = None

    @property
    def prompt(self) -> str:
        """System prompt for a technical answer."""
        if self.resolution is None:
            raise ValueError(f"{self.kind} action has no prompt")
        return prompt_for(self.resolution)


def reply(text: str, flow: Flow = Flow.CONVERSATION) -> Action:
    return Action(ActionKind.SEND_REPLY, flow=flow, text=text)


def _completeness(profile: UserProfile | None) -> int:
    return profile.completeness_percent() if profile else 0


class FlowRouter:
    def __init__(self, quota: QuotaTracker):
        self._quota = quota
        self._handlers: dict[
            MessageType,
            Callable[[str, Classification, Optional[UserProfile], ConversationState], Action],
        ] = {
            MessageType.GREETING: self._greeting,
            MessageType.QUESTION: self._question,
            MessageType.COMMAND: self._command,
            MessageType.LOCATION: lambda *_: reply(templates.LOCATION),
            MessageType.COMMERCIAL: lambda *_: reply(templates.COMMERCIAL),
            MessageType.EMERGENCY: self._emergency,
            MessageType.CASUAL: lambda *_: reply(templates.CASUAL),
            MessageType.UNCLEAR: lambda *_: reply(templates.UNCLEAR),
        }

    def route(
        self,
        text: str,
        classification: Classification,
        profile: UserProfile | None,
        state: ConversationState,
    ) -> Action:
        handler = self._handlers[classification.type]
        return handler(text, classification, profile, state)

    def route_resolved(
        self,
        result: ResolveResult,
        profile: UserProfile | None,
        state: ConversationState,
    ) -> Action:
        """Answer a question whose A/B clarification was just resolved."""
        if not result.resolved or result.resolution is None or result.original_question is None:
            raise ValueError("route_resolved requires a resolved clarification")
        return self._technical(result.original_question, result.resolution, profile, state)

    def _greeting(self, text, classification, profile, state) -> Action:
        return reply(templates.greeting(profile))

    def _question(self, text, classification, profile, state) -> Action:
        if classification.needs_clarification:
            return Action(ActionKind.REQUEST_CLARIFICATION, flow=Flow.TECHNICAL, question=text)
        resolution = Resolution.THEORY if is_definition_style(text) else Resolution.TROUBLESHOOTING
        return self._technical(text, resolution, profile, state)

    def _technical(
        self,
        question: str,
        resolution: Resolution,
        profile: UserProfile | None,
        state: ConversationState,
    ) -> Action:
        decision = self._quota.check(state, _completeness(profile))
        if not decision.allowed:
            return Action(ActionKind.DENY_QUOTA, flow=Flow.TECHNICAL, text=decision.message or "")
        return Action(
            ActionKind.TECHNICAL_ANSWER,
            flow=Flow.TECHNICAL,
            question=question,
            resolution=resolution,
        )

    def _command(self, text, classification, profile, state) -> Action:
        command = lexicons.find_phrase(text, lexicons.COMMANDS) or "help"
        command = command.lstrip("/")
        if command == "status":
            completeness = _completeness(profile)
            return reply(
                templates.quota_status(
                    self._quota.questions_used(state),
                    self._quota.limit_for(completeness),
                )
            )
        if command == "profile" and profile is not None:
            return reply(templates.profile_status(profile))
        return reply(templates.HELP)

    def _emergency(self, text, classification, profile, state) -> Action:
        return Action(ActionKind.EMERGENCY, text=templates.EMERGENCY, question=text)
