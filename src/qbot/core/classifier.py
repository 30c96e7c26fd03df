"""Rule-based message classifier.

Rules are evaluated in a fixed order and the first match wins:

    greeting > question > emergency > command > location > commercial
             > casual (maritime chatter) > unclear

Emergency vocabulary is checked before commands and location requests, so
"fire on board, need help" is an emergency rather than a help request.
"""

from __future__ import annotations

from dataclasses import dataclass

from qbot.core import lexicons
from qbot.core.types import MessageType

MIN_QUESTION_LENGTH = 10


@dataclass(frozen=True, slots=True)
class Classification:
    type: MessageType
    confidence: float
    is_ambiguous: bool = False
    needs_clarification: bool = False


def is_definitional(text: str) -> bool:
    """True when the text asks what something is or what it is for."""
    return lexicons.contains_any(text, lexicons.DEFINITIONAL_PATTERNS)


def is_definition_style(text: str) -> bool:
    """Wider test used to pick the definition prompt for unambiguous questions."""
    return lexicons.contains_any(text, lexicons.DEFINITION_STYLE_PATTERNS)


def has_problem_language(text: str) -> bool:
    return lexicons.contains_any(text, lexicons.PROBLEM_INDICATORS)


def technical_subject(text: str) -> str | None:
    """Return the first piece of equipment or regulation named in ``text``."""
    return lexicons.find_phrase(text, lexicons.TECHNICAL_SUBJECTS)


def needs_clarification(text: str) -> bool:
    """A definitional question about a named subject, with no sign of a fault."""
    return (
        is_definitional(text)
        and technical_subject(text) is not None
        and not has_problem_language(text)
    )


def classify(text: str) -> Classification:
    """Classify one inbound message. Never raises."""
    normalized = (text or "").strip().lower()
    if not normalized:
        return Classification(MessageType.UNCLEAR, 0.0)

    if lexicons.contains_any(normalized, lexicons.GREETINGS):
        return Classification(MessageType.GREETING, 0.9)

    if normalized.endswith("?") and len(normalized) >= MIN_QUESTION_LENGTH:
        return Classification(
            MessageType.QUESTION,
            0.95,
            is_ambiguous=is_definitional(normalized),
            needs_clarification=needs_clarification(normalized),
        )

    if lexicons.contains_any(normalized, lexicons.EMERGENCY_TERMS):
        return Classification(MessageType.EMERGENCY, 0.95)

    if lexicons.contains_any(normalized, lexicons.COMMANDS):
        return Classification(MessageType.COMMAND, 0.9)

    if lexicons.contains_any(normalized, lexicons.LOCATION_REQUESTS):
        return Classification(MessageType.LOCATION, 0.85)

    if lexicons.contains_any(normalized, lexicons.COMMERCIAL_TERMS):
        return Classification(MessageType.COMMERCIAL, 0.8)

    if lexicons.contains_any(normalized, lexicons.MARITIME_TERMS):
        return Classification(MessageType.CASUAL, 0.7)

    return Classification(MessageType.UNCLEAR, 0.5)
