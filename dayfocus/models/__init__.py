"""Data models for dayfocus."""

from dayfocus.models.task import (
    Task,
    Category,
    Importance,
    Urgency,
    EisenhowerQuadrant,
    RecurringInterval,
    RecurringEndType,
)
from dayfocus.models.preferences import (
    CategoryHourLimit,
    DailyMaxHours,
    UserPreferences,
    normalize_category_limits,
    normalize_preferences,
)
from dayfocus.models.streak import StreakState, StreakCelebration, default_streak_state

__all__ = [
    "Task",
    "Category",
    "Importance",
    "Urgency",
    "EisenhowerQuadrant",
    "RecurringInterval",
    "RecurringEndType",
    "CategoryHourLimit",
    "DailyMaxHours",
    "UserPreferences",
    "normalize_category_limits",
    "normalize_preferences",
    "StreakState",
    "StreakCelebration",
    "default_streak_state",
]
