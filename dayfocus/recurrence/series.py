"""Recurring series identity for dayfocus.

Every recurring occurrence belongs to exactly one series, identified by
``recurring_series_id``. Tasks created before series ids existed are
reconciled here before any expansion runs, and edits to one occurrence are
propagated to the rest of its series.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from dayfocus.engine.dates import date_key, day_index, normalize_date
from dayfocus.models.task import RecurringInterval, Task
from dayfocus.recurrence.rules import is_recurring_template, next_occurrence

logger = logging.getLogger(__name__)

Fingerprint = Tuple[str, str, str, Tuple[int, ...]]

_RECURRENCE_CLEARED = {
    "is_recurring": False,
    "recurring_interval": None,
    "recurring_days": None,
    "recurring_end_type": None,
    "recurring_end_count": None,
    "recurring_current_count": None,
    "recurring_series_id": None,
}


@dataclass
class _Lane:
    series_id: str
    last_due: datetime


def fingerprint(task: Task) -> Fingerprint:
    """Structural identity of a recurring template: name, category, interval, weekdays."""
    days = tuple(sorted(set(task.recurring_days or [])))
    return (task.name, task.category.id, str(task.recurring_interval), days)


def _seed_lanes(tasks: List[Task]) -> Dict[Fingerprint, List[_Lane]]:
    """One lane per already-identified series, ending at its latest occurrence."""
    latest: Dict[Tuple[Fingerprint, str], datetime] = {}
    for task in tasks:
        if not is_recurring_template(task) or not task.recurring_series_id:
            continue
        due = normalize_date(task.due_date)
        if due is None:
            continue
        key = (fingerprint(task), task.recurring_series_id)
        if key not in latest or due > latest[key]:
            latest[key] = due

    lanes: Dict[Fingerprint, List[_Lane]] = {}
    for (fp, series_id), last_due in sorted(latest.items(), key=lambda item: (item[1], item[0][1])):
        lanes.setdefault(fp, []).append(_Lane(series_id=series_id, last_due=last_due))
    return lanes


def ensure_stable_series_ids(tasks: List[Task]) -> List[Task]:
    """Assign series ids to legacy recurring tasks that lack one.

    Legacy tasks are grouped by fingerprint and walked in due-date order. A task
    joins an existing lane only if its due date is exactly the next occurrence of
    that lane's last task; otherwise it starts a new series named after its own id.
    Same-named but temporally unrelated series therefore stay separate.

    Args:
        tasks: Full task pool

    Returns:
        Task pool in the same order, legacy tasks updated with series ids
    """
    legacy = [
        task for task in tasks
        if is_recurring_template(task) and not task.recurring_series_id
        and normalize_date(task.due_date) is not None
    ]
    if not legacy:
        return list(tasks)

    lanes = _seed_lanes(tasks)
    assigned: Dict[str, str] = {}

    ordered = sorted(legacy, key=lambda t: (normalize_date(t.due_date), t.created_at.timestamp()))
    for task in ordered:
        fp = fingerprint(task)
        due = normalize_date(task.due_date)
        due_key = date_key(due)
        lane_match: Optional[_Lane] = None
        for lane in lanes.get(fp, []):
            expected = next_occurrence(lane.last_due, task.recurring_interval, task.recurring_days)
            if date_key(expected) == due_key:
                lane_match = lane
                break

        if lane_match is None:
            lane_match = _Lane(series_id=task.id, last_due=due)
            lanes.setdefault(fp, []).append(lane_match)
        else:
            lane_match.last_due = due
        assigned[task.id] = lane_match.series_id

    logger.info(f"Reconciled {len(assigned)} legacy recurring tasks into series")
    return [
        task.model_copy(update={"recurring_series_id": assigned[task.id]}) if task.id in assigned else task
        for task in tasks
    ]


def resolve_series_id(updated: Task, original: Optional[Task] = None) -> Optional[str]:
    """Series id that an edit applies to (stable across edits)."""
    if is_recurring_template(updated):
        return updated.recurring_series_id or (original.recurring_series_id if original else None) or updated.id
    if original is not None and is_recurring_template(original):
        return updated.recurring_series_id or original.recurring_series_id or original.id
    return updated.recurring_series_id


def sync_recurring_series(
    tasks: List[Task],
    updated: Task,
    original: Optional[Task] = None,
    today: Optional[datetime] = None,
) -> List[Task]:
    """Propagate an edit of one occurrence to the rest of its series.

    ``tasks`` must already contain ``updated`` in place of ``original``.

    - Recurrence settings (interval, weekdays, end rule) are copied to every occurrence.
    - For weekly rules, pending occurrences from today on that fall on weekdays no longer
      in the rule are dropped.
    - When recurrence is switched off, pending occurrences are dropped and completed ones
      keep their history without recurrence fields.
    """
    normalized = ensure_stable_series_ids(tasks)
    by_id = {task.id: task for task in normalized}
    current = by_id.get(updated.id, updated)
    before = by_id.get(original.id, original) if original is not None else None

    series_id = resolve_series_id(current, before)
    if not series_id:
        return normalized

    today = normalize_date(today or datetime.now())
    still_recurring = is_recurring_template(current)
    allowed_days = None
    if still_recurring and current.recurring_interval == RecurringInterval.WEEKLY and current.recurring_days:
        allowed_days = set(current.recurring_days)

    settings = {
        "recurring_interval": current.recurring_interval,
        "recurring_days": current.recurring_days,
        "recurring_end_type": current.recurring_end_type,
        "recurring_end_count": current.recurring_end_count,
    }

    out: List[Task] = []
    for task in normalized:
        if task.recurring_series_id != series_id and task.id != current.id:
            out.append(task)
            continue

        if task.id == current.id:
            if still_recurring:
                out.append(task.model_copy(update={"recurring_series_id": series_id, "is_recurring": True}))
            else:
                out.append(task.model_copy(update=_RECURRENCE_CLEARED))
            continue

        if not still_recurring:
            if task.completed:
                out.append(task.model_copy(update=_RECURRENCE_CLEARED))
            continue

        if allowed_days and not task.completed:
            due = normalize_date(task.due_date)
            if due is not None and due >= today and day_index(due) not in allowed_days:
                logger.debug(f"Dropping occurrence {task.id} on {date_key(due)}: weekday no longer in rule")
                continue

        out.append(task.model_copy(update={**settings, "is_recurring": True, "recurring_series_id": series_id}))

    return out


def apply_task_edit(tasks: List[Task], updated: Task, today: Optional[datetime] = None) -> List[Task]:
    """Replace a task by id and keep its recurring series consistent."""
    original = next((task for task in tasks if task.id == updated.id), None)
    replaced = [updated if task.id == updated.id else task for task in tasks]
    if original is None:
        replaced.append(updated)
    if (original is not None and original.is_recurring) or updated.is_recurring:
        return sync_recurring_series(replaced, updated, original, today)
    return replaced
