"""Constants for dayfocus.

This module centralizes all magic numbers and default values used throughout the application.
"""


# Task defaults
DEFAULT_ESTIMATED_HOURS = 1.0
MIN_ESTIMATED_HOURS = 0.25
MAX_ESTIMATED_HOURS = 24.0

# Scheduling
DEFAULT_MAX_TASKS_PER_DAY = 4
DEFAULT_HORIZON_DAYS = 14
WORK_CATEGORY_NAME = "Work"  # Not-yet-due Work tasks never land on weekends

# Category hour budgets, keyed by category name (weekday_max, weekend_max)
DEFAULT_CATEGORY_LIMITS = {
    "Work": (10.0, 10.0),
    "Home": (3.0, 3.0),
    "Health": (3.0, 3.0),
}

# Total estimated hours per day across all categories
DEFAULT_DAILY_MAX_HOURS_WEEKDAY = 8.0
DEFAULT_DAILY_MAX_HOURS_WEEKEND = 4.0

# Scoring
QUADRANT_BASE_SCORES = {
    "urgent-important": 100,
    "not-urgent-important": 80,
    "urgent-not-important": 60,
    "not-urgent-not-important": 40,
}
OVERDUE_BONUS_PER_DAY = 10
DUE_TODAY_BONUS = 40
DUE_WITHIN_ONE_DAY_BONUS = 20
DUE_WITHIN_THREE_DAYS_BONUS = 10
AGE_BONUS_PER_DAY = 2
MAX_AGE_BONUS = 20

# Recurrence
MAX_RECURRING_END_COUNT = 100

# Streaks
STREAK_MILESTONES = [3, 7, 14, 21, 30, 60, 100]
INITIAL_FREEZE_TOKENS = 1
FREEZE_TOKEN_EARN_INTERVAL = 7  # Every 7th consecutive day earns a token back
FREEZE_GRACE_GAP_DAYS = 2  # A gap of exactly one missed day can be bridged
