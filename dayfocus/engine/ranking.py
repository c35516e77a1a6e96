"""Stack ranking logic for dayfocus.

Sorts pending tasks by score, then by due date within equal scores.
This produces a deterministic ordering for scheduling.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from dayfocus.engine.dates import normalize_date
from dayfocus.engine.scoring import score_task
from dayfocus.models.task import Task


def rank_with_scores(tasks: List[Task], now: Optional[datetime] = None) -> List[Tuple[Task, int]]:
    """Score tasks and sort them highest score first.

    Ties break by earlier due date; Python's sort is stable, so input order
    decides beyond that.

    Args:
        tasks: Tasks to rank
        now: Reference time for scoring

    Returns:
        List of (task, score) pairs sorted by priority (highest first)
    """
    scored = [(task, score_task(task, now)) for task in tasks]
    return sorted(scored, key=lambda x: (-x[1], _due_sort_key(x[0])))


def prioritize_tasks(tasks: List[Task], now: Optional[datetime] = None) -> List[Task]:
    """Rank incomplete tasks by priority.

    Completed tasks are dropped. This function is deterministic - same inputs
    always produce same outputs.

    Args:
        tasks: List of tasks to rank
        now: Reference time for scoring

    Returns:
        List of incomplete tasks sorted by priority (highest first)
    """
    pending = [task for task in tasks if not task.completed]
    return [task for task, _ in rank_with_scores(pending, now)]


def _due_sort_key(task: Task) -> float:
    """Earlier due dates sort first; unreadable dates sort last."""
    due = normalize_date(task.due_date)
    if due is None:
        return float("inf")
    return due.toordinal()
