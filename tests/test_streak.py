"""Tests for the completion streak state machine."""

from datetime import datetime

from dayfocus.engine.streak import (
    clear_streak_celebration,
    get_next_milestone,
    merge_streak_states,
    register_completion,
)
from dayfocus.models.streak import StreakCelebration, StreakState, default_streak_state

NOW = datetime(2025, 1, 10, 9, 0)


def _complete(*days, state=None):
    state = state or default_streak_state()
    for day in days:
        state = register_completion(state, day, NOW)
    return state


class TestRegisterCompletion:
    """Test the transition function."""

    def test_first_completion(self):
        state = _complete("2025-01-01")
        assert state.current_streak == 1
        assert state.longest_streak == 1
        assert state.last_completed_date == "2025-01-01"

    def test_consecutive_days(self):
        state = _complete("2025-01-01", "2025-01-02")
        assert state.current_streak == 2
        assert state.longest_streak == 2

    def test_same_day_is_no_op(self):
        once = _complete("2025-01-01")
        twice = register_completion(once, datetime(2025, 1, 1, 22, 0), NOW)
        assert twice == once

    def test_freeze_bridges_one_missed_day(self):
        state = _complete("2025-01-01", "2025-01-02", "2025-01-04")
        assert state.current_streak == 3
        assert state.freeze_tokens == 0
        assert state.freeze_used_on == "2025-01-04"

    def test_gap_of_two_without_token_resets(self):
        start = default_streak_state().model_copy(update={"freeze_tokens": 0})
        state = _complete("2025-01-01", "2025-01-02", "2025-01-04", state=start)
        assert state.current_streak == 1

    def test_longer_gap_resets_but_keeps_longest(self):
        start = default_streak_state().model_copy(update={"freeze_tokens": 0})
        state = _complete("2025-01-01", "2025-01-02", "2025-01-05", state=start)
        assert state.current_streak == 1
        assert state.longest_streak == 2

    def test_next_day_clears_freeze_flag(self):
        state = _complete("2025-01-01", "2025-01-02", "2025-01-04", "2025-01-05")
        assert state.current_streak == 4
        assert state.freeze_used_on is None

    def test_backdated_completion_keeps_count(self):
        state = _complete("2025-01-01", "2025-01-02", "2025-01-04")
        backdated = register_completion(state, "2025-01-03", NOW)
        assert backdated.current_streak == 3
        assert backdated.last_completed_date == "2025-01-03"
        assert backdated.freeze_used_on is None

    def test_seventh_day_earns_token(self):
        days = [f"2025-01-0{i}" for i in range(1, 8)]
        state = _complete(*days)
        assert state.current_streak == 7
        assert state.freeze_tokens == 2

    def test_milestone_celebration(self):
        state = _complete("2025-01-01", "2025-01-02", "2025-01-03")
        assert state.milestone_celebration.streak == 3
        assert state.milestone_celebration.achieved_at == NOW

    def test_celebration_survives_non_milestone_days(self):
        state = _complete("2025-01-01", "2025-01-02", "2025-01-03", "2025-01-04")
        assert state.current_streak == 4
        assert state.milestone_celebration.streak == 3

    def test_input_not_mutated(self):
        start = default_streak_state()
        register_completion(start, "2025-01-01", NOW)
        assert start.current_streak == 0


class TestStreakHelpers:
    """Test dismiss, next milestone and merge."""

    def test_clear_celebration(self):
        state = _complete("2025-01-01", "2025-01-02", "2025-01-03")
        cleared = clear_streak_celebration(state)
        assert cleared.milestone_celebration is None
        assert cleared.current_streak == 3

    def test_next_milestone(self):
        assert get_next_milestone(0) == 3
        assert get_next_milestone(3) == 7
        assert get_next_milestone(59) == 60
        assert get_next_milestone(100) is None

    def test_merge_prefers_more_recent(self):
        older = StreakState(current_streak=9, longest_streak=12, last_completed_date="2025-01-02")
        newer = StreakState(current_streak=2, longest_streak=2, last_completed_date="2025-01-05")

        merged = merge_streak_states(older, newer)

        assert merged.current_streak == 2
        assert merged.longest_streak == 12
        assert merged.last_completed_date == "2025-01-05"

    def test_merge_keeps_local_when_incoming_older(self):
        local = StreakState(current_streak=4, longest_streak=4, last_completed_date="2025-01-05")
        incoming = StreakState(current_streak=8, longest_streak=8, last_completed_date="2025-01-01")

        merged = merge_streak_states(local, incoming)

        assert merged.current_streak == 4
        assert merged.longest_streak == 8

    def test_merge_keeps_non_null_celebration(self):
        celebration = StreakCelebration(streak=7, achieved_at=NOW)
        local = StreakState(current_streak=7, longest_streak=7, last_completed_date="2025-01-05",
                            milestone_celebration=celebration)
        incoming = StreakState(current_streak=8, longest_streak=8, last_completed_date="2025-01-06")

        merged = merge_streak_states(local, incoming)

        assert merged.current_streak == 8
        assert merged.milestone_celebration == celebration

    def test_merge_same_day_takes_max(self):
        a = StreakState(current_streak=3, longest_streak=5, last_completed_date="2025-01-05")
        b = StreakState(current_streak=4, longest_streak=4, last_completed_date="2025-01-05")

        merged = merge_streak_states(a, b)

        assert merged.current_streak == 4
        assert merged.longest_streak == 5

    def test_merge_into_empty_state(self):
        merged = merge_streak_states(default_streak_state(), StreakState(current_streak=2, longest_streak=2,
                                                                         last_completed_date="2025-01-05"))
        assert merged.current_streak == 2
        assert merged.last_completed_date == "2025-01-05"
