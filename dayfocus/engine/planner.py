"""Planning operations that combine the engine pieces.

These are the entry points callers use when the task pool or the reference
day changes: recompute the schedule, add a task through the category gate,
edit a task, complete a task.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from dayfocus.engine.category_gate import CategoryLimitCheck, check_category_limits
from dayfocus.engine.dates import normalize_date
from dayfocus.engine.scheduler import SchedulingResult, assign_start_dates
from dayfocus.engine.streak import register_completion
from dayfocus.models.preferences import UserPreferences
from dayfocus.models.streak import StreakState
from dayfocus.models.task import Task
from dayfocus.recurrence.expand import expand_recurring_tasks, handle_recurring_completion
from dayfocus.recurrence.series import apply_task_edit

logger = logging.getLogger(__name__)


class TaskNotFoundError(LookupError):
    """Raised when an operation references a task id that is not in the pool."""


class CompletionResult:
    """Result of completing a task."""

    def __init__(self, tasks: List[Task], streak: StreakState, completed: Task,
                 next_occurrence: Optional[Task] = None):
        self.tasks = tasks
        self.streak = streak
        self.completed = completed
        self.next_occurrence = next_occurrence


def recompute_schedule(
    tasks: List[Task],
    preferences: Optional[UserPreferences] = None,
    today: Optional[datetime] = None,
    max_per_day: Optional[int] = None,
    horizon_days: Optional[int] = None,
) -> SchedulingResult:
    """Expand recurring series over the horizon, then assign start days.

    Args:
        tasks: Full task pool
        preferences: User preferences (defaults when None)
        today: Reference day
        max_per_day: Override for the per-day task-count capacity
        horizon_days: Override for the look-ahead window

    Returns:
        SchedulingResult whose ``created_occurrences`` lists new recurring occurrences
    """
    preferences = preferences or UserPreferences()
    today = normalize_date(today or datetime.now())
    horizon = horizon_days if horizon_days is not None else preferences.horizon_days

    expansion = expand_recurring_tasks(tasks, today=today, horizon_days=horizon)
    result = assign_start_dates(
        expansion.tasks,
        preferences=preferences,
        today=today,
        max_per_day=max_per_day,
        horizon_days=horizon,
    )
    result.created_occurrences = expansion.created
    logger.info(
        f"Recomputed schedule for {len(result.tasks)} tasks "
        f"({len(expansion.created)} new occurrences, {len(result.overflow_tasks)} unplaced)"
    )
    return result


def add_task(
    tasks: List[Task],
    new_task: Task,
    today: Optional[datetime] = None,
) -> Tuple[List[Task], CategoryLimitCheck]:
    """Add a task if the category limit gate admits it.

    Returns:
        (task pool, gate outcome); the pool is unchanged when the task is rejected
    """
    check = check_category_limits(tasks, new_task, today)
    if not check.allowed:
        logger.info(f"Rejected task '{new_task.name}' for category {new_task.category.name}")
        return list(tasks), check
    return list(tasks) + [new_task], check


def update_task(tasks: List[Task], updated: Task, today: Optional[datetime] = None) -> List[Task]:
    """Replace a task and propagate recurrence changes through its series."""
    if not any(task.id == updated.id for task in tasks):
        raise TaskNotFoundError(f"Task {updated.id} not found")
    return apply_task_edit(tasks, updated.model_copy(update={"updated_at": datetime.now()}), today)


def complete_task(
    tasks: List[Task],
    streak: StreakState,
    task_id: str,
    now: Optional[datetime] = None,
) -> CompletionResult:
    """Mark a task completed, queue its next occurrence and update the streak.

    The completed task's start day is fixed to the completion day.

    Raises:
        TaskNotFoundError: If no task has ``task_id``
    """
    now = now or datetime.now()
    today = normalize_date(now)

    target = next((task for task in tasks if task.id == task_id), None)
    if target is None:
        raise TaskNotFoundError(f"Task {task_id} not found")
    if target.completed:
        return CompletionResult(tasks=list(tasks), streak=streak, completed=target)

    completed = target.model_copy(update={
        "completed": True,
        "completed_at": now,
        "start_date": today,
        "updated_at": now,
    })
    pool = [completed if task.id == task_id else task for task in tasks]

    upcoming = handle_recurring_completion(completed, pool, today, now)
    if upcoming is not None:
        pool.append(upcoming)
        logger.info(f"Queued next occurrence of series {completed.series_id} on {upcoming.due_date.date()}")

    return CompletionResult(
        tasks=pool,
        streak=register_completion(streak, now, now),
        completed=completed,
        next_occurrence=upcoming,
    )
