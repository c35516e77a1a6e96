"""Category daily-limit gate.

Checked when a new task is proposed, never during scheduling.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from dayfocus.engine.dates import date_key, normalize_date
from dayfocus.models.task import Task


class CategoryLimitCheck(BaseModel):
    """Outcome of the category limit gate."""

    allowed: bool
    message: Optional[str] = None


def limit_message(limit: int, category_name: str) -> str:
    return (
        f"You've reached your daily limit of {limit} tasks for {category_name}. "
        "Focus on completing existing tasks first."
    )


def check_category_limits(
    tasks: List[Task],
    new_task: Task,
    today: Optional[datetime] = None,
) -> CategoryLimitCheck:
    """Decide whether ``new_task`` may be added today.

    Future-dated tasks are always admitted. Otherwise the pending tasks in the
    same category that sit on today (start date, else due date) and are not
    themselves future-dated are counted against the category's daily limit.
    """
    today = normalize_date(today or datetime.now())
    today_key = date_key(today)

    new_due = normalize_date(new_task.due_date)
    if new_due is not None and new_due > today:
        return CategoryLimitCheck(allowed=True)

    count = 0
    for task in tasks:
        if task.completed or task.category.id != new_task.category.id:
            continue
        due = normalize_date(task.due_date)
        if due is not None and due > today:
            continue
        if date_key(task.start_date or task.due_date) == today_key:
            count += 1

    limit = new_task.category.daily_limit
    if count >= limit:
        return CategoryLimitCheck(allowed=False, message=limit_message(limit, new_task.category.name))
    return CategoryLimitCheck(allowed=True)
