"""Scheduling algorithm for dayfocus.

Assigns a start day to every pending task within a look-ahead horizon.
Each day has a task-count capacity, per-category hour caps (weekday vs weekend)
and a total hour budget. Recurring occurrences always keep their own day;
one-off tasks fill the remaining capacity greedily in score order.

The heuristic is deliberately greedy: no backtracking, no lookahead beyond
"already due vs. due later" ordering.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set, Tuple

from dateutil.relativedelta import relativedelta

from dayfocus.engine.dates import date_key, day_index, is_weekend, normalize_date
from dayfocus.engine.ranking import prioritize_tasks
from dayfocus.models.constants import DEFAULT_ESTIMATED_HOURS, WORK_CATEGORY_NAME
from dayfocus.models.preferences import UserPreferences
from dayfocus.models.task import RecurringInterval, Task

logger = logging.getLogger(__name__)


class SchedulingResult:
    """Result of scheduling operation."""

    def __init__(self):
        self.tasks: List[Task] = []
        self.overflow_tasks: List[Task] = []
        self.dropped_duplicates: List[Task] = []
        self.created_occurrences: List[Task] = []
        self.reference_date: Optional[datetime] = None


class _DayUsage:
    """Running tally of what one day already holds."""

    def __init__(self):
        self.count = 0
        self.hours = 0.0
        self.category_hours: Dict[str, float] = defaultdict(float)

    def add(self, task: Task) -> None:
        hours = task_hours(task)
        self.count += 1
        self.hours += hours
        self.category_hours[task.category.name] += hours


def task_hours(task: Task) -> float:
    """Estimated hours, treating a missing/zero estimate as the default."""
    return task.estimated_hours or DEFAULT_ESTIMATED_HOURS


def _normalized(task: Task) -> Task:
    updates = {"due_date": normalize_date(task.due_date)}
    if task.start_date is not None:
        updates["start_date"] = normalize_date(task.start_date)
    return task.model_copy(update=updates)


def _completed_day(task: Task) -> Optional[str]:
    return date_key(task.start_date or task.completed_at or task.due_date)


def _placement_order(task: Task) -> Tuple[datetime, float]:
    # timestamp() so naive and aware creation times compare
    return task.due_date, task.created_at.timestamp()


def _rolled_day(task: Task, today: datetime) -> datetime:
    """First day on or after ``today`` that the occurrence's rule allows.

    Daily series land on today, weekly ones on the next listed weekday and
    monthly ones on the series' day of the month (clamped to the month's end).
    """
    if task.recurring_interval == RecurringInterval.WEEKLY:
        days = [day for day in (task.recurring_days or []) if 0 <= day <= 6]
        days = days or [day_index(task.due_date)]
        offset = min((day - day_index(today)) % 7 for day in days)
        return today + timedelta(days=offset)

    if task.recurring_interval == RecurringInterval.MONTHLY:
        day_of_month = task.due_date.day
        candidate = today + relativedelta(day=day_of_month)
        if candidate < today:
            candidate = today + relativedelta(months=1, day=day_of_month)
        return candidate

    return today


def _place_recurring(
    pending: List[Task],
    completed: List[Task],
    today: datetime,
    usage: Dict[str, _DayUsage],
) -> Tuple[List[Task], List[Task]]:
    """Pin recurring occurrences to their due day, deduplicating by (series, day).

    Overdue occurrences roll forward to the first day on or after today that
    their rule allows, when the series has nothing there yet.
    Returns (placed, dropped_duplicates).
    """
    taken: Set[Tuple[str, str]] = {
        (task.series_id, date_key(task.due_date)) for task in completed if task.is_recurring
    }
    placed: List[Task] = []
    dropped: List[Task] = []

    current = [task for task in pending if task.due_date >= today]
    overdue = [task for task in pending if task.due_date < today]
    current.sort(key=_placement_order)
    # Latest overdue occurrence gets first claim on the rolled day
    overdue.sort(key=_placement_order, reverse=True)

    for task in current:
        key = (task.series_id, date_key(task.due_date))
        if key in taken:
            dropped.append(task)
            continue
        taken.add(key)
        placed.append(task.model_copy(update={"start_date": task.due_date}))

    for task in overdue:
        target = _rolled_day(task, today)
        key = (task.series_id, date_key(target))
        if key in taken:
            placed.append(task.model_copy(update={"start_date": task.due_date}))
            continue
        taken.add(key)
        logger.debug(f"Rolling overdue occurrence {task.id} of series {task.series_id} forward to {key[1]}")
        placed.append(task.model_copy(update={"start_date": target, "due_date": target}))

    for task in placed:
        if task.start_date >= today:
            usage[date_key(task.start_date)].add(task)
    if dropped:
        logger.debug(f"Dropped {len(dropped)} duplicate recurring occurrences")
    return placed, dropped


def _admissible(
    task: Task,
    day: datetime,
    weekend: bool,
    used: _DayUsage,
    preferences: UserPreferences,
) -> bool:
    """Check soft constraints for a task that is not yet due on ``day``."""
    if task.due_date <= day:
        return True
    if weekend and task.category.name == WORK_CATEGORY_NAME:
        return False
    hours = task_hours(task)
    cap = preferences.category_cap(task.category.name, weekend)
    if used.category_hours[task.category.name] + hours > cap:
        return False
    if used.hours + hours > preferences.daily_max_hours.for_day(weekend):
        return False
    return True


def assign_start_dates(
    tasks: List[Task],
    preferences: Optional[UserPreferences] = None,
    today: Optional[datetime] = None,
    max_per_day: Optional[int] = None,
    horizon_days: Optional[int] = None,
) -> SchedulingResult:
    """Assign start days to all pending tasks.

    Algorithm:
    1. Normalize dates; split into completed, recurring pending and one-off pending
    2. Completed tasks consume capacity on their day but never move
    3. Recurring occurrences are pinned to their due day (deduplicated by series+day)
    4. One-offs are ranked by score
    5. Walk forward day by day filling remaining capacity; tasks due on or before
       the day are considered first and bypass the hour caps
    6. A weekday with no admissions and no prior usage ends the walk

    Args:
        tasks: Full task pool (after recurrence expansion)
        preferences: Category caps, daily hour budget, defaults
        today: Reference day (defaults to the current local day)
        max_per_day: Task-count capacity per day (defaults to preferences)
        horizon_days: Days to walk forward (defaults to preferences)

    Returns:
        SchedulingResult with the recombined pool, unplaced one-offs and dropped duplicates
    """
    preferences = preferences or UserPreferences()
    today = normalize_date(today or datetime.now())
    max_per_day = max_per_day if max_per_day is not None else preferences.max_daily_tasks
    horizon_days = horizon_days if horizon_days is not None else preferences.horizon_days

    result = SchedulingResult()
    result.reference_date = today

    pool = [_normalized(task) for task in tasks]
    completed = [task for task in pool if task.completed]
    recurring = [task for task in pool if not task.completed and task.is_recurring]
    one_offs = [task for task in pool if not task.completed and not task.is_recurring]

    usage: Dict[str, _DayUsage] = defaultdict(_DayUsage)
    for task in completed:
        key = _completed_day(task)
        if key is not None:
            usage[key].add(task)

    placed_recurring, dropped = _place_recurring(recurring, completed, today, usage)
    result.dropped_duplicates = dropped

    remaining = prioritize_tasks(one_offs, today)
    scheduled: List[Task] = []

    for offset in range(horizon_days):
        if not remaining:
            break
        day = today + timedelta(days=offset)
        key = date_key(day)
        weekend = is_weekend(day)
        used = usage[key]
        carried_in = used.count > 0 or used.hours > 0

        capacity = max_per_day - used.count
        if capacity <= 0:
            logger.debug(f"{key}: no capacity left ({used.count} already placed)")
            continue

        due_now = [task for task in remaining if task.due_date <= day]
        due_later = [task for task in remaining if task.due_date > day]

        admitted: List[Task] = []
        for task in due_now + due_later:
            if len(admitted) >= capacity:
                break
            if not _admissible(task, day, weekend, used, preferences):
                continue
            placed = task.model_copy(update={"start_date": day})
            used.add(placed)
            admitted.append(task)
            scheduled.append(placed)

        logger.debug(f"{key}: admitted {len(admitted)} of capacity {capacity}")
        admitted_ids = {task.id for task in admitted}
        remaining = [task for task in remaining if task.id not in admitted_ids]

        if not admitted and not weekend and not carried_in and remaining:
            logger.debug(f"{key}: nothing admissible on an empty weekday, stopping")
            break

    for key, used in usage.items():
        if used.count > max_per_day:
            logger.warning(f"{key} holds {used.count} tasks, above the limit of {max_per_day}")

    result.overflow_tasks = remaining
    result.tasks = scheduled + remaining + placed_recurring + completed
    return result
