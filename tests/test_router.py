from datetime import date

import pytest

from qbot.ai import prompts
from qbot.core import templates
from qbot.core.classifier import classify
from qbot.core.clarification import ResolveResult
from qbot.core.router import FlowRouter
from qbot.core.types import ActionKind, Flow, Resolution
from qbot.storage.models import ConversationState

from conftest import USER, complete_profile, incomplete_profile


@pytest.fixture
def router(quota):
    return FlowRouter(quota)


def _route(router, text, profile=None, state=None):
    state = state or ConversationState(user_key=USER)
    return router.route(text, classify(text), profile or complete_profile(), state)


def _exhausted(count: int) -> ConversationState:
    return ConversationState(
        user_key=USER,
        daily_question_count=count,
        last_question_date=date(2026, 10, 18),
    )


def test_greeting_uses_profile_name(router):
    action = _route(router, "hi")
    assert action.kind == ActionKind.SEND_REPLY
    assert action.text.startswith("Hello Krish Kapoor!")


@pytest.mark.parametrize(
    "text, template",
    [
        ("koi hai", templates.LOCATION),
        ("I want to buy a pump", templates.COMMERCIAL),
        ("The engine room is hot today", templates.CASUAL),
        ("asdf qwerty", templates.UNCLEAR),
        ("help", templates.HELP),
    ],
)
def test_canned_replies(router, text, template):
    action = _route(router, text)
    assert action.kind == ActionKind.SEND_REPLY
    assert action.flow == Flow.CONVERSATION
    assert action.text == template


def test_ambiguous_question_requests_clarification(router):
    action = _route(router, "What is a turbocharger?")
    assert action.kind == ActionKind.REQUEST_CLARIFICATION
    assert action.flow == Flow.TECHNICAL
    assert action.question == "What is a turbocharger?"


def test_clarification_ignores_exhausted_quota(router):
    action = _route(router, "What is a turbocharger?", state=_exhausted(10))
    assert action.kind == ActionKind.REQUEST_CLARIFICATION


def test_fault_question_gets_troubleshooting_answer(router):
    action = _route(router, "My turbocharger is not working?")
    assert action.kind == ActionKind.TECHNICAL_ANSWER
    assert action.resolution == Resolution.TROUBLESHOOTING
    assert action.prompt == prompts.TROUBLESHOOTING_PROMPT


def test_definition_style_question_gets_definition_prompt(router):
    action = _route(router, "Can you explain ballast water exchange?")
    assert action.kind == ActionKind.TECHNICAL_ANSWER
    assert action.prompt == prompts.DEFINITION_PROMPT


def test_technical_question_over_quota_is_denied(router):
    action = _route(router, "My turbocharger is not working?", incomplete_profile(), _exhausted(3))
    assert action.kind == ActionKind.DENY_QUOTA
    assert "complete your profile" in action.text


def test_emergency_bypasses_quota(router):
    action = _route(router, "Mayday, man overboard", state=_exhausted(10))
    assert action.kind == ActionKind.EMERGENCY
    assert action.text == templates.EMERGENCY
    assert action.question == "Mayday, man overboard"


def test_status_command_reports_usage(router):
    action = _route(router, "status", state=_exhausted(4))
    assert "4/10" in action.text


def test_profile_command_lists_missing_fields(router):
    action = _route(router, "/profile", incomplete_profile())
    assert "29%" in action.text
    assert "ship name" in action.text


def test_route_resolved_builds_answer(router):
    result = ResolveResult(True, "What is a turbocharger?", Resolution.THEORY)
    action = router.route_resolved(result, complete_profile(), ConversationState(user_key=USER))
    assert action.kind == ActionKind.TECHNICAL_ANSWER
    assert action.question == "What is a turbocharger?"
    assert action.prompt == prompts.DEFINITION_PROMPT


def test_route_resolved_respects_quota(router):
    result = ResolveResult(True, "What is a turbocharger?", Resolution.THEORY)
    action = router.route_resolved(result, complete_profile(), _exhausted(10))
    assert action.kind == ActionKind.DENY_QUOTA


def test_route_resolved_rejects_unresolved(router):
    with pytest.raises(ValueError):
        router.route_resolved(ResolveResult(False), None, ConversationState(user_key=USER))
