"""Next-occurrence and end-of-series rules for recurring tasks."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from dayfocus.engine.dates import DateLike, day_index, normalize_date
from dayfocus.models.task import RecurringEndType, RecurringInterval, Task


class RecurrenceError(ValueError):
    """Raised when a recurrence operation is invoked on an invalid task (caller bug)."""


def is_recurring_template(task: Task) -> bool:
    return bool(task.is_recurring and task.recurring_interval)


def _days_until_next_weekday(current: int, days: Iterable[int]) -> Optional[int]:
    """Days until the earliest weekday in ``days`` strictly after ``current`` (wrapping)."""
    offsets = sorted(((day - current) % 7) or 7 for day in set(days) if 0 <= day <= 6)
    return offsets[0] if offsets else None


def next_occurrence(
    value: DateLike,
    interval: Optional[str],
    days: Optional[Iterable[int]] = None,
) -> Optional[datetime]:
    """Compute the next occurrence date after ``value``.

    - daily: next day
    - weekly: earliest listed weekday (Sunday=0) strictly after this one, wrapping
      to next week; one week later when no weekdays are listed
    - monthly: same day next month, clamped to the month's last day

    Returns None for an invalid input date.
    """
    base = normalize_date(value)
    if base is None:
        return None

    if interval == RecurringInterval.WEEKLY:
        offset = _days_until_next_weekday(day_index(base), days or [])
        return base + timedelta(days=offset if offset is not None else 7)

    if interval == RecurringInterval.MONTHLY:
        return base + relativedelta(months=1)

    # Daily (and anything unrecognised) steps one day
    return base + timedelta(days=1)


def has_reached_end(task: Task) -> bool:
    """Check whether an 'after'-bounded series has used up its occurrences.

    A missing current count is treated as the first occurrence.
    """
    if not is_recurring_template(task):
        return False
    if task.recurring_end_type != RecurringEndType.AFTER or not task.recurring_end_count:
        return False
    return (task.recurring_current_count or 1) >= task.recurring_end_count


def next_count(task: Task) -> Optional[int]:
    """Occurrence count for the occurrence following ``task``."""
    if task.recurring_end_type == RecurringEndType.AFTER:
        return (task.recurring_current_count or 1) + 1
    return task.recurring_current_count


def count_exceeds_end(task: Task, count: Optional[int]) -> bool:
    return (
        task.recurring_end_type == RecurringEndType.AFTER
        and bool(task.recurring_end_count)
        and count is not None
        and count > task.recurring_end_count
    )
