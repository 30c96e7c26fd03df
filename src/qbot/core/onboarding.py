"""Onboarding step machine for users without a profile.

``advance`` is pure: it takes the current state and the inbound text and
returns the reply, the next state, and (on the final step) the profile to
create. Persistence is left to the caller.

Steps::

    name_collection -> [name_confirmation] -> rank_collection
        -> ship_collection -> company_collection -> profile created
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from qbot.core import lexicons, templates
from qbot.core.types import Flow
from qbot.storage.models import IDLE_STEP, ConversationState, UserProfile

NAME_COLLECTION = "name_collection"
NAME_CONFIRMATION = "name_confirmation"
RANK_COLLECTION = "rank_collection"
SHIP_COLLECTION = "ship_collection"
COMPANY_COLLECTION = "company_collection"

_CONFIRMATIONS = {"yes", "y", "confirm", "correct", "ok", "haan"}
_DENIALS = {"no", "n", "nope", "wrong", "incorrect", "nahi"}

CHIEF_ENGINEER = "Chief Engineer"
SECOND_ENGINEER = "Second Engineer"
THIRD_ENGINEER = "Third Engineer"
FOURTH_ENGINEER = "Fourth Engineer"
ENGINE_CADET = "Engine Cadet"
MASTER = "Master"
CHIEF_OFFICER = "Chief Officer"
SECOND_OFFICER = "Second Officer"
THIRD_OFFICER = "Third Officer"
DECK_CADET = "Deck Cadet"
ETO = "Electro-Technical Officer"
SHIP_MANAGER = "Ship Manager"
SUPERINTENDENT = "Marine Superintendent"

# Matched as whole words anywhere in the answer, longest alias first.
_RANK_ALIASES: dict[str, str] = {
    "chief engineer": CHIEF_ENGINEER,
    "chief eng": CHIEF_ENGINEER,
    "c/e": CHIEF_ENGINEER,
    "c.e": CHIEF_ENGINEER,
    "second engineer": SECOND_ENGINEER,
    "2nd engineer": SECOND_ENGINEER,
    "second eng": SECOND_ENGINEER,
    "2nd eng": SECOND_ENGINEER,
    "2/e": SECOND_ENGINEER,
    "2.e": SECOND_ENGINEER,
    "third engineer": THIRD_ENGINEER,
    "3rd engineer": THIRD_ENGINEER,
    "third eng": THIRD_ENGINEER,
    "3rd eng": THIRD_ENGINEER,
    "3/e": THIRD_ENGINEER,
    "3.e": THIRD_ENGINEER,
    "fourth engineer": FOURTH_ENGINEER,
    "4th engineer": FOURTH_ENGINEER,
    "fourth eng": FOURTH_ENGINEER,
    "4th eng": FOURTH_ENGINEER,
    "4/e": FOURTH_ENGINEER,
    "4.e": FOURTH_ENGINEER,
    "engine cadet": ENGINE_CADET,
    "trainee marine engineer": ENGINE_CADET,
    "junior engineer": ENGINE_CADET,
    "master": MASTER,
    "captain": MASTER,
    "capt": MASTER,
    "chief officer": CHIEF_OFFICER,
    "chief mate": CHIEF_OFFICER,
    "first officer": CHIEF_OFFICER,
    "1st officer": CHIEF_OFFICER,
    "c/o": CHIEF_OFFICER,
    "c.o": CHIEF_OFFICER,
    "second officer": SECOND_OFFICER,
    "2nd officer": SECOND_OFFICER,
    "2/o": SECOND_OFFICER,
    "2.o": SECOND_OFFICER,
    "third officer": THIRD_OFFICER,
    "3rd officer": THIRD_OFFICER,
    "3/o": THIRD_OFFICER,
    "3.o": THIRD_OFFICER,
    "deck cadet": DECK_CADET,
    "deck trainee": DECK_CADET,
    "electro technical officer": ETO,
    "electro-technical officer": ETO,
    "electrical officer": ETO,
    "eto": ETO,
    "ship manager": SHIP_MANAGER,
    "marine superintendent": SUPERINTENDENT,
    "technical superintendent": SUPERINTENDENT,
    "superintendent": SUPERINTENDENT,
    "msi": SUPERINTENDENT,
}

# Short or generic words that only name a rank when sent on their own.
_RANK_EXACT: dict[str, str] = {
    "ce": CHIEF_ENGINEER,
    "chief": CHIEF_ENGINEER,
    "2e": SECOND_ENGINEER,
    "2nd": SECOND_ENGINEER,
    "second": SECOND_ENGINEER,
    "3e": THIRD_ENGINEER,
    "4e": FOURTH_ENGINEER,
    "cadet": ENGINE_CADET,
    "trainee": ENGINE_CADET,
    "tme": ENGINE_CADET,
    "je": ENGINE_CADET,
}

# Things people type instead of their name while being asked for it.
_NOT_A_NAME: tuple[str, ...] = (
    lexicons.TECHNICAL_SUBJECTS
    + lexicons.MARITIME_TERMS
    + lexicons.EMERGENCY_TERMS
    + lexicons.QUESTION_WORDS
    + ("function", "omd", "oil mist", "detector", "tank", "system", "vent", "lifeboat",
       "pipe", "piping", "machinery", "equipment")
)


@dataclass(frozen=True, slots=True)
class OnboardingOutcome:
    reply: str
    state: ConversationState
    profile: Optional[UserProfile] = None

    @property
    def completed(self) -> bool:
        return self.profile is not None


def start(
    state: ConversationState,
    first_message: str,
    display_name: str | None,
    now: datetime,
) -> OnboardingOutcome:
    """Send the welcome and wait for the user's name."""
    step_data = {"first_message": first_message}
    if display_name:
        step_data["sender_name"] = display_name
    new_state = replace(
        state,
        current_flow=Flow.ONBOARDING,
        current_step=NAME_COLLECTION,
        step_data=step_data,
        last_activity=now,
    )
    return OnboardingOutcome(templates.ONBOARDING_WELCOME, new_state)


def advance(
    state: ConversationState,
    text: str,
    now: datetime,
    display_name: str | None = None,
) -> OnboardingOutcome:
    if state.current_flow != Flow.ONBOARDING:
        return start(state, text, display_name, now)

    answer = text.strip()
    step = state.current_step

    if step == NAME_COLLECTION:
        return _collect_name(state, answer, now)
    if step == NAME_CONFIRMATION:
        return _confirm_name(state, answer, now)
    if step == RANK_COLLECTION:
        if len(answer) < 2:
            return _stay(state, templates.ONBOARDING_RANK_RETRY, now)
        return _next(state, SHIP_COLLECTION, {"rank": _normalize_rank(answer)},
                     templates.ONBOARDING_ASK_SHIP, now)
    if step == SHIP_COLLECTION:
        if len(answer) < 2:
            return _stay(state, templates.ONBOARDING_SHIP_RETRY, now)
        return _next(state, COMPANY_COLLECTION, {"ship_name": answer},
                     templates.ONBOARDING_ASK_COMPANY, now)
    if step == COMPANY_COLLECTION:
        if len(answer) < 2:
            return _stay(state, templates.ONBOARDING_COMPANY_RETRY, now)
        return _complete(state, answer, now)

    # Unknown step, e.g. written by an older version: start over.
    return start(state, text, display_name, now)


def looks_like_name(text: str) -> bool:
    """Reject questions, technical text and run-on sentences."""
    if len(text) < 2 or "?" in text or len(text.split()) > 8:
        return False
    if lexicons.contains_any(text, _NOT_A_NAME):
        return False
    parts = text.split()
    first, last = parts[0], " ".join(parts[1:])
    return len(first) <= 20 and len(last) <= 30


def is_uncertain_name(name: str) -> bool:
    """Names worth a yes/no confirmation before they are stored."""
    words = name.split()
    return any((
        len(words) == 1 and len(name) < 4,
        len(words) == 1 and len(name) > 10,
        bool(re.fullmatch(r"[a-z\s]+", name)),
        bool(re.match(r"^\d", name)),
        "." in name and "@" not in name,
    ))


def _collect_name(state: ConversationState, name: str, now: datetime) -> OnboardingOutcome:
    if not looks_like_name(name):
        return _stay(state, templates.ONBOARDING_NAME_RETRY, now)
    if is_uncertain_name(name):
        return _next(state, NAME_CONFIRMATION, {"pending_name": name},
                     templates.ONBOARDING_NAME_CONFIRM.format(name=name), now)
    return _accept_name(state, name, now)


def _confirm_name(state: ConversationState, answer: str, now: datetime) -> OnboardingOutcome:
    pending = state.step_data.get("pending_name", "")
    if answer.lower() in _CONFIRMATIONS and pending:
        return _accept_name(state, pending, now)
    # A corrected name sent in place of "yes" becomes the new candidate.
    if answer.lower() not in _DENIALS and looks_like_name(answer):
        return _collect_name(state, answer, now)
    return _next(state, NAME_COLLECTION, {"pending_name": None},
                 templates.ONBOARDING_NAME_CORRECTION, now)


def _accept_name(state: ConversationState, name: str, now: datetime) -> OnboardingOutcome:
    full_name = " ".join(name.split())
    reply = templates.ONBOARDING_ASK_RANK.format(first_name=full_name.split()[0])
    return _next(state, RANK_COLLECTION, {"full_name": full_name, "pending_name": None}, reply, now)


def _complete(state: ConversationState, company: str, now: datetime) -> OnboardingOutcome:
    data = state.step_data
    profile = UserProfile(
        user_key=state.user_key,
        full_name=data.get("full_name", ""),
        rank=data.get("rank", ""),
        ship_name=data.get("ship_name", ""),
        company=company,
        whatsapp_number=state.user_key,
    )
    new_state = replace(
        state,
        current_flow=Flow.CONVERSATION,
        current_step=IDLE_STEP,
        step_data={},
        last_activity=now,
    )
    reply = templates.ONBOARDING_COMPLETE.format(first_name=profile.first_name or "Seafarer")
    return OnboardingOutcome(reply, new_state, profile)


def _next(
    state: ConversationState,
    step: str,
    updates: dict,
    reply: str,
    now: datetime,
) -> OnboardingOutcome:
    step_data = {**state.step_data, **updates}
    step_data = {k: v for k, v in step_data.items() if v is not None}
    return OnboardingOutcome(
        reply,
        replace(state, current_step=step, step_data=step_data, last_activity=now),
    )


def _stay(state: ConversationState, reply: str, now: datetime) -> OnboardingOutcome:
    return OnboardingOutcome(reply, replace(state, last_activity=now))


def _normalize_rank(rank: str) -> str:
    """Map common spellings and abbreviations to a canonical rank.

    Unrecognised ranks are kept as typed, title-cased when all lower case.
    """
    cleaned = " ".join(rank.split())
    lowered = cleaned.lower()
    if lowered in _RANK_EXACT:
        return _RANK_EXACT[lowered]
    alias = lexicons.find_phrase(lowered, tuple(_RANK_ALIASES))
    if alias is not None:
        return _RANK_ALIASES[alias]
    return cleaned if any(c.isupper() for c in cleaned) else cleaned.title()
