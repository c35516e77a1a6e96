"""Task creation factory for dayfocus.

This module centralizes task creation logic to eliminate duplication
and ensure consistent default values across the application.
"""

import uuid
from datetime import datetime
from typing import Optional, Dict, Any, List

from dayfocus.engine.dates import normalize_date
from dayfocus.models.task import (
    Category,
    Importance,
    RecurringEndType,
    RecurringInterval,
    Task,
    Urgency,
)
from dayfocus.models.constants import DEFAULT_ESTIMATED_HOURS


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Returns:
        Dictionary with default task field values using constants
    """
    return {
        "importance": Importance.NOT_IMPORTANT,
        "urgency": Urgency.NOT_URGENT,
        "estimated_hours": DEFAULT_ESTIMATED_HOURS,
        "completed": False,
        "completed_at": None,
        "is_recurring": False,
        "recurring_interval": None,
        "recurring_days": None,
        "recurring_end_type": None,
        "recurring_end_count": None,
        "recurring_current_count": None,
    }


def create_task_base(
    name: str,
    category: Category,
    due_date: datetime,
    importance: Optional[Importance] = None,
    urgency: Optional[Urgency] = None,
    estimated_hours: Optional[float] = None,
    is_recurring: bool = False,
    recurring_interval: Optional[RecurringInterval] = None,
    recurring_days: Optional[List[int]] = None,
    recurring_end_type: Optional[RecurringEndType] = None,
    recurring_end_count: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Create a task with defaults, allowing overrides.

    The due date is normalized to local midnight and doubles as the initial
    start date until the scheduler assigns one. A recurring task starts a new
    series whose id is its own id, and counts as occurrence number one.

    Args:
        name: Task name (required)
        category: Category the task belongs to (required)
        due_date: Day the task is due (required)
        importance: Importance flag (defaults to not-important)
        urgency: Urgency flag (defaults to not-urgent)
        estimated_hours: Estimated effort (defaults to constant)
        is_recurring: Whether the task starts a recurring series
        recurring_interval: daily / weekly / monthly
        recurring_days: Weekdays for weekly series (Sunday=0)
        recurring_end_type: never / after
        recurring_end_count: Occurrences before an 'after' series ends
        now: Creation timestamp (defaults to the current local time)

    Returns:
        Task object with defaults applied
    """
    now = now or datetime.now()
    defaults = create_task_defaults()
    due = normalize_date(due_date)
    if due is None:
        raise ValueError(f"Invalid due date: {due_date!r}")

    task_id = str(uuid.uuid4())
    recurring = bool(is_recurring and recurring_interval)

    return Task(
        id=task_id,
        recurring_series_id=task_id if recurring else None,
        name=name,
        category=category,
        importance=importance if importance is not None else defaults["importance"],
        urgency=urgency if urgency is not None else defaults["urgency"],
        due_date=due,
        estimated_hours=estimated_hours if estimated_hours is not None else defaults["estimated_hours"],
        completed=defaults["completed"],
        completed_at=defaults["completed_at"],
        created_at=now,
        updated_at=now,
        start_date=due,
        is_recurring=recurring,
        recurring_interval=recurring_interval if recurring else defaults["recurring_interval"],
        recurring_days=sorted(set(recurring_days)) if recurring and recurring_days else defaults["recurring_days"],
        recurring_end_type=(recurring_end_type or RecurringEndType.NEVER) if recurring else defaults["recurring_end_type"],
        recurring_end_count=recurring_end_count if recurring else defaults["recurring_end_count"],
        recurring_current_count=1 if recurring else defaults["recurring_current_count"],
    )
