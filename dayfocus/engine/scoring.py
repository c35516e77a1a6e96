"""Task scoring logic for dayfocus.

Assigns a numeric priority score from the task's Eisenhower quadrant,
due-date proximity, overdue-ness and age. Higher scores are scheduled first.
This function is deterministic - same inputs always produce same outputs.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from dayfocus.engine.dates import days_between, normalize_date
from dayfocus.models.task import Task, Importance, Urgency, EisenhowerQuadrant
from dayfocus.models.constants import (
    AGE_BONUS_PER_DAY,
    DUE_TODAY_BONUS,
    DUE_WITHIN_ONE_DAY_BONUS,
    DUE_WITHIN_THREE_DAYS_BONUS,
    MAX_AGE_BONUS,
    OVERDUE_BONUS_PER_DAY,
    QUADRANT_BASE_SCORES,
)


class TaskScore(BaseModel):
    """Score breakdown for a single task."""

    task_id: str
    score: int
    quadrant: EisenhowerQuadrant
    days_overdue: int
    priority: int

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


def get_quadrant(task: Task) -> EisenhowerQuadrant:
    """Classify a task into its Eisenhower quadrant."""
    important = task.importance == Importance.IMPORTANT
    urgent = task.urgency == Urgency.URGENT

    if urgent and important:
        return EisenhowerQuadrant.URGENT_IMPORTANT
    if important:
        return EisenhowerQuadrant.NOT_URGENT_IMPORTANT
    if urgent:
        return EisenhowerQuadrant.URGENT_NOT_IMPORTANT
    return EisenhowerQuadrant.NOT_URGENT_NOT_IMPORTANT


def get_priority_level(score: int) -> int:
    """Map a score to a priority level (1=Critical ... 5=Low).

    Args:
        score: Task score

    Returns:
        Priority level 1-5
    """
    if score >= 120:
        return 1
    if score >= 100:
        return 2
    if score >= 80:
        return 3
    if score >= 60:
        return 4
    return 5


def _due_bonuses(days_to_due: Optional[int]) -> tuple:
    """Return (days_overdue, overdue_bonus, due_bonus) for a day offset.

    Today itself is never overdue. Due today outranks due in 1-3 days.
    """
    if days_to_due is None:
        return 0, 0, 0
    if days_to_due < 0:
        days_overdue = -days_to_due
        return days_overdue, days_overdue * OVERDUE_BONUS_PER_DAY, 0
    if days_to_due == 0:
        return 0, 0, DUE_TODAY_BONUS
    if days_to_due <= 1:
        return 0, 0, DUE_WITHIN_ONE_DAY_BONUS
    if days_to_due <= 3:
        return 0, 0, DUE_WITHIN_THREE_DAYS_BONUS
    return 0, 0, 0


def calculate_task_score(task: Task, now: Optional[datetime] = None) -> TaskScore:
    """Calculate the full score breakdown for a task.

    Args:
        task: Task to score
        now: Reference time (defaults to the current local time)

    Returns:
        TaskScore with score, quadrant, days overdue and priority level
    """
    today = normalize_date(now or datetime.now())
    quadrant = get_quadrant(task)
    base = QUADRANT_BASE_SCORES[quadrant.value]

    days_overdue, overdue_bonus, due_bonus = _due_bonuses(days_between(today, task.due_date))

    # Age bonus prevents procrastination on tasks that keep getting pushed
    days_since_created = days_between(task.created_at, today) or 0
    age_bonus = min(max(days_since_created, 0) * AGE_BONUS_PER_DAY, MAX_AGE_BONUS)

    score = base + overdue_bonus + due_bonus + age_bonus
    return TaskScore(
        task_id=task.id,
        score=score,
        quadrant=quadrant,
        days_overdue=days_overdue,
        priority=get_priority_level(score),
    )


def score_task(task: Task, now: Optional[datetime] = None) -> int:
    """Numeric priority score for a task (higher is more urgent to schedule)."""
    return calculate_task_score(task, now).score
