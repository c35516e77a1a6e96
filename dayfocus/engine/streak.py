"""Daily completion streak with freeze tokens.

``register_completion`` is the single transition function. A freeze token
bridges exactly one missed day; every seventh consecutive day earns one back.
"""

from datetime import datetime
from typing import Optional

from dayfocus.engine.dates import DateLike, date_key, days_between, parse_date_key
from dayfocus.models.constants import (
    FREEZE_GRACE_GAP_DAYS,
    FREEZE_TOKEN_EARN_INTERVAL,
    STREAK_MILESTONES,
)
from dayfocus.models.streak import StreakCelebration, StreakState


def register_completion(
    state: StreakState,
    completion_date: DateLike,
    now: Optional[datetime] = None,
) -> StreakState:
    """Apply one completion to the streak.

    Args:
        state: Current streak state
        completion_date: Day the task was completed
        now: Timestamp recorded on a milestone celebration

    Returns:
        New StreakState (the input is never mutated)
    """
    completion_key = date_key(completion_date)
    if completion_key is None or completion_key == state.last_completed_date:
        return state

    now = now or datetime.now()
    current = state.current_streak
    tokens = state.freeze_tokens
    freeze_used_on = state.freeze_used_on

    last = parse_date_key(state.last_completed_date)
    if last is None:
        current = 1
        freeze_used_on = None
    else:
        gap = days_between(last, completion_key)
        if gap <= 0:
            # Backdated completion: record the day, leave the count alone
            return state.model_copy(update={
                "last_completed_date": completion_key,
                "freeze_used_on": None,
            })
        if gap == 1:
            current += 1
            freeze_used_on = None
        elif gap == FREEZE_GRACE_GAP_DAYS and tokens > 0:
            current += 1
            tokens -= 1
            freeze_used_on = completion_key
        else:
            current = 1
            freeze_used_on = None

    if current % FREEZE_TOKEN_EARN_INTERVAL == 0:
        tokens += 1

    celebration = state.milestone_celebration
    if current in STREAK_MILESTONES:
        celebration = StreakCelebration(streak=current, achieved_at=now)

    return state.model_copy(update={
        "current_streak": current,
        "longest_streak": max(state.longest_streak, current),
        "freeze_tokens": tokens,
        "last_completed_date": completion_key,
        "freeze_used_on": freeze_used_on,
        "milestone_celebration": celebration,
    })


def clear_streak_celebration(state: StreakState) -> StreakState:
    """Dismiss the pending milestone celebration."""
    if state.milestone_celebration is None:
        return state
    return state.model_copy(update={"milestone_celebration": None})


def get_next_milestone(current_streak: int) -> Optional[int]:
    for milestone in STREAK_MILESTONES:
        if milestone > current_streak:
            return milestone
    return None


def merge_streak_states(current: StreakState, incoming: StreakState) -> StreakState:
    """Reconcile two copies of a user's streak (e.g. stored vs. submitted).

    The copy with the more recent completion wins; the longest streak and a
    pending celebration survive from either side.
    """
    current_day = parse_date_key(current.last_completed_date)
    incoming_day = parse_date_key(incoming.last_completed_date)
    longest = max(current.longest_streak, incoming.longest_streak)

    if current_day is None:
        return incoming.model_copy(update={
            "current_streak": max(current.current_streak, incoming.current_streak),
            "longest_streak": longest,
            "milestone_celebration": incoming.milestone_celebration or current.milestone_celebration,
        })

    if incoming_day is None or incoming_day < current_day:
        return current.model_copy(update={
            "longest_streak": longest,
            "milestone_celebration": current.milestone_celebration or incoming.milestone_celebration,
        })

    if incoming_day > current_day:
        return incoming.model_copy(update={
            "longest_streak": longest,
            "milestone_celebration": incoming.milestone_celebration or current.milestone_celebration,
        })

    # Same completion day
    return incoming.model_copy(update={
        "current_streak": max(current.current_streak, incoming.current_streak),
        "longest_streak": longest,
        "milestone_celebration": incoming.milestone_celebration or current.milestone_celebration,
    })
