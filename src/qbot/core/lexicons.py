"""Trigger-phrase tables used by the rule-based classifier.

Every table is matched case-insensitively against lower-cased text. ASCII
phrases must appear as whole words (so "hi" does not fire inside "ship");
non-ASCII phrases (Devanagari and similar) are matched as plain substrings.
Inflected forms are listed explicitly rather than stemmed.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

GREETINGS: tuple[str, ...] = (
    "hi",
    "hello",
    "hey",
    "hola",
    "namaste",
    "good morning",
    "good afternoon",
    "good evening",
    "नमस्ते",
)

DEFINITIONAL_PATTERNS: tuple[str, ...] = (
    "what is",
    "what are",
    "purpose of",
    "how does",
    "function of",
    "used for",
)

# Broader set used to decide between the definition and troubleshooting
# prompt for questions that did not need clarification.
DEFINITION_STYLE_PATTERNS: tuple[str, ...] = DEFINITIONAL_PATTERNS + (
    "define",
    "meaning of",
    "explain",
    "why used",
)

EQUIPMENT_TERMS: tuple[str, ...] = (
    "engine",
    "engines",
    "pump",
    "pumps",
    "compressor",
    "compressors",
    "valve",
    "valves",
    "boiler",
    "boilers",
    "turbine",
    "turbines",
    "generator",
    "generators",
    "motor",
    "motors",
    "turbocharger",
    "turbochargers",
    "purifier",
    "purifiers",
    "separator",
    "separators",
    "heat exchanger",
    "cooler",
    "incinerator",
    "steering gear",
    "windlass",
    "crankcase",
    "governor",
    "injector",
    "oil mist detector",
)

# Conventions and regulatory regimes that attract the same "what is it"
# versus "how do I comply / fix it" ambiguity as machinery.
REGULATION_TERMS: tuple[str, ...] = (
    "marpol",
    "solas",
    "stcw",
    "ism code",
    "isps code",
    "ows",
    "bwts",
)

TECHNICAL_SUBJECTS: tuple[str, ...] = EQUIPMENT_TERMS + REGULATION_TERMS

PROBLEM_INDICATORS: tuple[str, ...] = (
    "not working",
    "not starting",
    "broken",
    "failed",
    "failure",
    "stopped",
    "problem",
    "problems",
    "issue",
    "issues",
    "malfunction",
    "error",
    "errors",
    "fault",
    "fix",
    "repair",
    "troubleshoot",
    "troubleshooting",
    "leak",
    "leaking",
    "overheating",
    "tripped",
    "alarm",
)

COMMANDS: tuple[str, ...] = (
    "/help",
    "/profile",
    "/status",
    "help",
    "profile",
    "status",
)

LOCATION_REQUESTS: tuple[str, ...] = (
    "who is here",
    "who's here",
    "nearby",
    "near me",
    "where",
    "location",
    "koi hai",
    "कोई है",
)

EMERGENCY_TERMS: tuple[str, ...] = (
    "emergency",
    "urgent",
    "mayday",
    "sos",
    "distress",
    "medical",
    "accident",
    "man overboard",
    "fire on board",
)

COMMERCIAL_TERMS: tuple[str, ...] = (
    "buy",
    "price",
    "prices",
    "pricing",
    "store",
    "order",
    "purchase",
    "cost",
    "costs",
    "payment",
    "quote",
)

MARITIME_TERMS: tuple[str, ...] = (
    "ship",
    "ships",
    "vessel",
    "vessels",
    "boat",
    "port",
    "harbor",
    "harbour",
    "sea",
    "ocean",
    "captain",
    "officer",
    "crew",
    "sailor",
    "seafarer",
    "marine",
    "maritime",
    "engine",
    "deck",
    "cargo",
    "navigation",
    "anchor",
    "sailing",
    "voyage",
)

QUESTION_WORDS: tuple[str, ...] = ("why", "how", "what", "when", "where", "which")


@lru_cache(maxsize=None)
def _pattern(phrases: tuple[str, ...]) -> re.Pattern[str] | None:
    words = [p for p in phrases if p.isascii()]
    if not words:
        return None
    alternation = "|".join(re.escape(p) for p in sorted(words, key=len, reverse=True))
    return re.compile(rf"(?<!\w)(?:{alternation})(?!\w)")


def find_phrase(text: str, phrases: tuple[str, ...]) -> str | None:
    """Return the earliest phrase from ``phrases`` present in ``text``."""
    lowered = text.lower()
    pattern = _pattern(phrases)
    if pattern is not None:
        match = pattern.search(lowered)
        if match:
            return match.group(0)
    for phrase in phrases:
        if not phrase.isascii() and phrase in lowered:
            return phrase
    return None


def contains_any(text: str, phrases: Iterable[str]) -> bool:
    return find_phrase(text, tuple(phrases)) is not None
