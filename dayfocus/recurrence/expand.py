"""Materialize recurring task series into concrete Task occurrences."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Set, Tuple

from dayfocus.engine.dates import date_key, is_same_day, normalize_date
from dayfocus.models.constants import DEFAULT_HORIZON_DAYS
from dayfocus.models.task import RecurringEndType, Task
from dayfocus.recurrence.rules import (
    RecurrenceError,
    count_exceeds_end,
    has_reached_end,
    is_recurring_template,
    next_count,
    next_occurrence,
)
from dayfocus.recurrence.series import ensure_stable_series_ids

logger = logging.getLogger(__name__)

OccurrenceKey = Tuple[str, str]


class ExpansionResult:
    """Result of expanding recurring series over the horizon."""

    def __init__(self, tasks: List[Task], created: List[Task]):
        self.tasks = tasks
        self.created = created


def occurrence_key(task: Task) -> Optional[OccurrenceKey]:
    """(series id, day-key) identity of a recurring occurrence."""
    key = date_key(task.due_date)
    if key is None:
        return None
    return (task.series_id, key)


def _existing_keys(tasks: Iterable[Task]) -> Set[OccurrenceKey]:
    keys: Set[OccurrenceKey] = set()
    for task in tasks:
        if not task.is_recurring:
            continue
        key = occurrence_key(task)
        if key is not None:
            keys.add(key)
    return keys


def _count_after(template: Task, steps: int) -> Optional[int]:
    """Position-based count of the occurrence ``steps`` past ``template``."""
    if template.recurring_end_type == RecurringEndType.AFTER:
        return (template.recurring_current_count or 1) + steps
    return template.recurring_current_count


def _new_occurrence(template: Task, due: datetime, count: Optional[int], now: datetime) -> Task:
    return template.model_copy(update={
        "id": str(uuid.uuid4()),
        "recurring_series_id": template.series_id,
        "due_date": due,
        "start_date": due,
        "completed": False,
        "completed_at": None,
        "created_at": now,
        "updated_at": now,
        "recurring_current_count": count,
    })


def expand_recurring_tasks(
    tasks: List[Task],
    today: Optional[datetime] = None,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    now: Optional[datetime] = None,
) -> ExpansionResult:
    """Create missing occurrences for every active recurring series up to the horizon.

    Walks ``next_occurrence`` from each pending template's due date while the
    candidate is before ``today + horizon_days``. Candidates before today are
    stepped over. A candidate is skipped when its (series id, day-key) already
    exists in the pool, completed or not, so the expansion is idempotent.

    Args:
        tasks: Full task pool
        today: Reference day (defaults to the current local day)
        horizon_days: Look-ahead window in days
        now: Creation timestamp for new occurrences

    Returns:
        ExpansionResult with the expanded pool and the newly created occurrences
    """
    today = normalize_date(today or datetime.now())
    now = now or datetime.now()
    limit = today + timedelta(days=horizon_days)

    pool = ensure_stable_series_ids(tasks)
    existing = _existing_keys(pool)

    templates = [
        task for task in pool
        if is_recurring_template(task) and not task.completed and not has_reached_end(task)
        and normalize_date(task.due_date) is not None
    ]
    templates.sort(key=lambda t: normalize_date(t.due_date))

    created: List[Task] = []
    for template in templates:
        steps = 1
        candidate = next_occurrence(template.due_date, template.recurring_interval, template.recurring_days)
        while candidate is not None and candidate < limit:
            count = _count_after(template, steps)
            if count_exceeds_end(template, count):
                break
            if candidate >= today:
                key = (template.series_id, date_key(candidate))
                if key not in existing:
                    occurrence = _new_occurrence(template, candidate, count, now)
                    existing.add(key)
                    created.append(occurrence)
            candidate = next_occurrence(candidate, template.recurring_interval, template.recurring_days)
            steps += 1

    if created:
        logger.info(f"Materialized {len(created)} recurring occurrences up to {date_key(limit)}")
    return ExpansionResult(tasks=pool + created, created=created)


def generate_next_recurring_task(
    task: Task,
    today: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Optional[Task]:
    """Build the occurrence that follows ``task`` in its series.

    Returns None when the series has ended. If the next date falls on today,
    the occurrence after it is used instead.

    Raises:
        RecurrenceError: If ``task`` is not a recurring task
    """
    if not is_recurring_template(task):
        raise RecurrenceError(f"Cannot generate next occurrence for non-recurring task {task.id}")
    if has_reached_end(task):
        return None

    today = normalize_date(today or datetime.now())
    now = now or datetime.now()

    due = next_occurrence(task.due_date, task.recurring_interval, task.recurring_days)
    if due is None:
        return None
    count = next_count(task)
    if is_same_day(due, today):
        due = next_occurrence(due, task.recurring_interval, task.recurring_days)
        if task.recurring_end_type == RecurringEndType.AFTER:
            count = (count or 1) + 1

    if count_exceeds_end(task, count):
        return None
    return _new_occurrence(task, due, count, now)


def handle_recurring_completion(
    task: Task,
    pool: List[Task],
    today: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Optional[Task]:
    """Next occurrence to add after completing ``task``, if any.

    Returns None for one-off tasks, ended series, or when the pool already holds
    an occurrence of the series on that day.
    """
    if not is_recurring_template(task):
        return None

    upcoming = generate_next_recurring_task(task, today, now)
    if upcoming is None:
        return None
    if occurrence_key(upcoming) in _existing_keys(pool):
        logger.debug(f"Series {task.series_id} already has an occurrence on {date_key(upcoming.due_date)}")
        return None
    return upcoming
