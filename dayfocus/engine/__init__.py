"""Scheduling engine for dayfocus."""

from dayfocus.engine.dates import normalize_date, date_key, is_same_day, is_weekend
from dayfocus.engine.scoring import score_task, calculate_task_score, TaskScore
from dayfocus.engine.ranking import prioritize_tasks
from dayfocus.engine.scheduler import assign_start_dates, SchedulingResult
from dayfocus.engine.category_gate import check_category_limits, CategoryLimitCheck
from dayfocus.engine.streak import register_completion, merge_streak_states, clear_streak_celebration

__all__ = [
    "normalize_date",
    "date_key",
    "is_same_day",
    "is_weekend",
    "score_task",
    "calculate_task_score",
    "TaskScore",
    "prioritize_tasks",
    "assign_start_dates",
    "SchedulingResult",
    "check_category_limits",
    "CategoryLimitCheck",
    "register_completion",
    "merge_streak_states",
    "clear_streak_celebration",
]
