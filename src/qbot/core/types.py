"""Shared types and enumerations."""

from __future__ import annotations

from enum import StrEnum


class Platform(StrEnum):
    WHATSAPP = "whatsapp"
    TELEGRAM = "telegram"


class MessageType(StrEnum):
    GREETING = "greeting"
    QUESTION = "question"
    COMMAND = "command"
    LOCATION = "location"
    COMMERCIAL = "commercial"
    EMERGENCY = "emergency"
    CASUAL = "casual"
    UNCLEAR = "unclear"


class Flow(StrEnum):
    CONVERSATION = "conversation"
    TECHNICAL = "technical"
    ONBOARDING = "onboarding"


class Direction(StrEnum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class Resolution(StrEnum):
    THEORY = "theory"
    TROUBLESHOOTING = "troubleshooting"


class ActionKind(StrEnum):
    SEND_REPLY = "send_reply"
    TECHNICAL_ANSWER = "technical_answer"
    REQUEST_CLARIFICATION = "request_clarification"
    DENY_QUOTA = "deny_quota"
    EMERGENCY = "emergency"
