from datetime import date

from qbot.core.quota import QuotaTracker
from qbot.config import QuotaConfig
from qbot.storage.models import ConversationState

from conftest import USER


def test_today_uses_configured_timezone(quota, clock):
    assert quota.today() == date(2026, 10, 18)
    clock.advance(hours=13)  # 19:00 UTC is 00:30 next day in Kolkata
    assert quota.today() == date(2026, 10, 19)


def test_limit_depends_on_profile_completeness(quota):
    assert quota.limit_for(50) == 10
    assert quota.limit_for(49) == 3
    assert quota.limit_for(0) == 3


def test_counter_from_earlier_day_counts_as_zero(quota):
    state = ConversationState(
        user_key=USER,
        daily_question_count=3,
        last_question_date=date(2026, 10, 17),
    )
    decision = quota.check(state, 29)
    assert decision.allowed
    assert decision.used == 0
    assert decision.remaining == 3


def test_incomplete_profile_denial_message(quota):
    state = ConversationState(
        user_key=USER,
        daily_question_count=3,
        last_question_date=date(2026, 10, 18),
    )
    decision = quota.check(state, 29)
    assert not decision.allowed
    assert "3 bot answers" in decision.message
    assert "complete your profile" in decision.message


def test_complete_profile_denial_message(quota):
    state = ConversationState(
        user_key=USER,
        daily_question_count=10,
        last_question_date=date(2026, 10, 18),
    )
    decision = quota.check(state, 71)
    assert not decision.allowed
    assert "10 technical questions" in decision.message
    assert "reset at midnight" in decision.message


def test_custom_limits(states, clock):
    tracker = QuotaTracker(
        states,
        QuotaConfig(complete_profile_limit=1, incomplete_profile_limit=0),
        clock=clock,
    )
    assert not tracker.check(ConversationState(user_key=USER), 0).allowed
    assert tracker.check(ConversationState(user_key=USER), 100).allowed


async def test_consume_persists_and_rolls_over(quota, states):
    stale = ConversationState(
        user_key=USER,
        daily_question_count=7,
        last_question_date=date(2026, 10, 17),
    )
    updated = await quota.consume(stale)
    assert updated.daily_question_count == 1
    assert updated.last_question_date == date(2026, 10, 18)

    stored = await states.get(USER)
    assert stored.daily_question_count == 1
    assert stored.last_question_date == date(2026, 10, 18)

    again = await quota.consume(stored)
    assert again.daily_question_count == 2


async def test_check_never_writes(quota, states):
    quota.check(ConversationState(user_key=USER), 100)
    assert await states.get(USER) is None
