from datetime import datetime, timezone

import pytest

from qbot.core import onboarding, templates
from qbot.core.types import Flow
from qbot.storage.models import IDLE_STEP, ConversationState

from conftest import USER

NOW = datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)


def _fresh() -> ConversationState:
    return ConversationState(user_key=USER)


def _at(step: str, **data) -> ConversationState:
    return ConversationState(
        user_key=USER,
        current_flow=Flow.ONBOARDING,
        current_step=step,
        step_data=data,
    )


def test_first_message_starts_onboarding():
    outcome = onboarding.advance(_fresh(), "What is a boiler?", NOW, "Krish")
    assert outcome.reply == templates.ONBOARDING_WELCOME
    assert outcome.state.current_flow == Flow.ONBOARDING
    assert outcome.state.current_step == onboarding.NAME_COLLECTION
    assert outcome.state.step_data == {
        "first_message": "What is a boiler?",
        "sender_name": "Krish",
    }
    assert not outcome.completed


@pytest.mark.parametrize(
    "text",
    [
        "What is a boiler?",
        "Emergency! Engine fire on board",
        "my main engine pump",
        "one two three four five six seven eight nine",
    ],
)
def test_non_names_are_rejected(text):
    outcome = onboarding.advance(_at(onboarding.NAME_COLLECTION), text, NOW)
    assert outcome.reply == templates.ONBOARDING_NAME_RETRY
    assert outcome.state.current_step == onboarding.NAME_COLLECTION


def test_clear_name_goes_straight_to_rank():
    outcome = onboarding.advance(_at(onboarding.NAME_COLLECTION), "Krish Kapoor", NOW)
    assert outcome.state.current_step == onboarding.RANK_COLLECTION
    assert outcome.state.step_data["full_name"] == "Krish Kapoor"
    assert "Thank you Krish" in outcome.reply


@pytest.mark.parametrize("name", ["raj kumar", "Bo", "Maximiliansson", "J. Smith", "2nd Kapoor"])
def test_uncertain_names_ask_for_confirmation(name):
    outcome = onboarding.advance(_at(onboarding.NAME_COLLECTION), name, NOW)
    assert outcome.state.current_step == onboarding.NAME_CONFIRMATION
    assert outcome.state.step_data["pending_name"] == name
    assert f'"{name}"' in outcome.reply


def test_devanagari_name_is_not_uncertain():
    assert not onboarding.is_uncertain_name("राज कुमार")


def test_confirmation_accepts_pending_name():
    state = _at(onboarding.NAME_CONFIRMATION, pending_name="raj kumar")
    outcome = onboarding.advance(state, "Yes", NOW)
    assert outcome.state.current_step == onboarding.RANK_COLLECTION
    assert outcome.state.step_data["full_name"] == "raj kumar"
    assert "pending_name" not in outcome.state.step_data


def test_denial_asks_for_the_correct_name():
    state = _at(onboarding.NAME_CONFIRMATION, pending_name="raj kumar")
    outcome = onboarding.advance(state, "no", NOW)
    assert outcome.reply == templates.ONBOARDING_NAME_CORRECTION
    assert outcome.state.current_step == onboarding.NAME_COLLECTION
    assert "pending_name" not in outcome.state.step_data


def test_corrected_name_replaces_the_pending_one():
    state = _at(onboarding.NAME_CONFIRMATION, pending_name="raj kumar")
    outcome = onboarding.advance(state, "Raj Kumar", NOW)
    assert outcome.state.current_step == onboarding.RANK_COLLECTION
    assert outcome.state.step_data["full_name"] == "Raj Kumar"
    assert "pending_name" not in outcome.state.step_data


def test_uncertain_correction_is_confirmed_again():
    state = _at(onboarding.NAME_CONFIRMATION, pending_name="raj kumar")
    outcome = onboarding.advance(state, "rajesh kumar", NOW)
    assert outcome.state.current_step == onboarding.NAME_CONFIRMATION
    assert outcome.state.step_data["pending_name"] == "rajesh kumar"


def test_full_walkthrough_creates_profile():
    state = _at(onboarding.RANK_COLLECTION, full_name="Krish Kapoor")

    outcome = onboarding.advance(state, "chief engineer", NOW)
    assert outcome.state.current_step == onboarding.SHIP_COLLECTION
    assert outcome.state.step_data["rank"] == "Chief Engineer"

    outcome = onboarding.advance(outcome.state, "MV Ocean Star", NOW)
    assert outcome.state.current_step == onboarding.COMPANY_COLLECTION

    outcome = onboarding.advance(outcome.state, "Oceanic Shipping", NOW)
    assert outcome.completed
    assert outcome.profile.full_name == "Krish Kapoor"
    assert outcome.profile.rank == "Chief Engineer"
    assert outcome.profile.ship_name == "MV Ocean Star"
    assert outcome.profile.company == "Oceanic Shipping"
    assert outcome.profile.whatsapp_number == USER
    assert outcome.state.current_flow == Flow.CONVERSATION
    assert outcome.state.current_step == IDLE_STEP
    assert outcome.state.step_data == {}
    assert "Welcome aboard Krish" in outcome.reply


@pytest.mark.parametrize(
    "step, retry",
    [
        (onboarding.RANK_COLLECTION, templates.ONBOARDING_RANK_RETRY),
        (onboarding.SHIP_COLLECTION, templates.ONBOARDING_SHIP_RETRY),
        (onboarding.COMPANY_COLLECTION, templates.ONBOARDING_COMPANY_RETRY),
    ],
)
def test_too_short_answers_are_retried(step, retry):
    outcome = onboarding.advance(_at(step, full_name="Krish Kapoor"), "x", NOW)
    assert outcome.reply == retry
    assert outcome.state.current_step == step


def test_unknown_step_starts_over():
    outcome = onboarding.advance(_at("legacy_step"), "hello", NOW)
    assert outcome.reply == templates.ONBOARDING_WELCOME
    assert outcome.state.current_step == onboarding.NAME_COLLECTION


@pytest.mark.parametrize(
    "answer, rank",
    [
        ("ce", "Chief Engineer"),
        ("c/e", "Chief Engineer"),
        ("chief eng", "Chief Engineer"),
        ("2/e", "Second Engineer"),
        ("2nd engineer", "Second Engineer"),
        ("3rd eng", "Third Engineer"),
        ("4/E", "Fourth Engineer"),
        ("Capt", "Master"),
        ("chief mate", "Chief Officer"),
        ("2/o", "Second Officer"),
        ("ETO", "Electro-Technical Officer"),
        ("tme", "Engine Cadet"),
        ("deck cadet", "Deck Cadet"),
        ("technical superintendent", "Marine Superintendent"),
        ("senior chief engineer", "Chief Engineer"),
        ("bosun", "Bosun"),
        ("AB Seaman", "AB Seaman"),
    ],
)
def test_rank_aliases_are_normalized(answer, rank):
    outcome = onboarding.advance(_at(onboarding.RANK_COLLECTION, full_name="Krish Kapoor"), answer, NOW)
    assert outcome.state.step_data["rank"] == rank


def test_generic_rank_word_only_counts_on_its_own():
    state = _at(onboarding.RANK_COLLECTION, full_name="Krish Kapoor")
    assert onboarding.advance(state, "chief", NOW).state.step_data["rank"] == "Chief Engineer"
    assert onboarding.advance(state, "chief cook", NOW).state.step_data["rank"] == "Chief Cook"
