"""FastAPI web application for dayfocus.

A thin adapter over the engine: every request loads the caller's state,
runs one engine operation plus a schedule recompute, and saves the result.
"""

import logging
import os
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, status
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from dayfocus.auth.dependencies import get_current_user_id
from dayfocus.database.database import get_db, init_db
from dayfocus.database.repository import UserStateRepository
from dayfocus.engine.category_gate import CategoryLimitCheck
from dayfocus.engine.dates import date_key, normalize_date
from dayfocus.engine.planner import (
    TaskNotFoundError,
    add_task,
    complete_task,
    recompute_schedule,
    update_task,
)
from dayfocus.engine.ranking import prioritize_tasks
from dayfocus.engine.scheduler import SchedulingResult
from dayfocus.engine.streak import clear_streak_celebration, get_next_milestone, merge_streak_states
from dayfocus.models.constants import MAX_ESTIMATED_HOURS, MAX_RECURRING_END_COUNT, MIN_ESTIMATED_HOURS
from dayfocus.models.preferences import UserPreferences, normalize_preferences
from dayfocus.models.streak import StreakState
from dayfocus.models.task import (
    Category,
    Importance,
    RecurringEndType,
    RecurringInterval,
    Task,
    Urgency,
)
from dayfocus.models.task_factory import create_task_base

load_dotenv()

logger = logging.getLogger(__name__)


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}")
        return None


# Deployment-wide overrides of the per-user scheduling preferences
MAX_TASKS_PER_DAY = _env_int("DAYFOCUS_MAX_TASKS_PER_DAY")
HORIZON_DAYS = _env_int("DAYFOCUS_HORIZON_DAYS")

# Initialize FastAPI app
app = FastAPI(
    title="dayfocus API",
    description="Decides which day each of your tasks belongs on",
    version="0.1.0",
)


@app.on_event("startup")
async def startup():
    init_db()


# Request models
class CategoryRequest(BaseModel):
    """Category supplied with a new task."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=2, max_length=50)
    color: str = Field("#6b7280", pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: str = Field("tag")
    daily_limit: int = Field(2, ge=1, le=20)


class RecurrenceFields(BaseModel):
    """Recurrence settings shared by create and update requests."""
    is_recurring: bool = False
    recurring_interval: Optional[RecurringInterval] = None
    recurring_days: Optional[List[int]] = None
    recurring_end_type: Optional[RecurringEndType] = None
    recurring_end_count: Optional[int] = Field(None, ge=1, le=MAX_RECURRING_END_COUNT)

    @model_validator(mode="after")
    def check_recurrence(self):
        if not self.is_recurring:
            return self
        if self.recurring_interval is None:
            raise ValueError("Recurring tasks need an interval")
        if self.recurring_interval == RecurringInterval.WEEKLY and not self.recurring_days:
            raise ValueError("Weekly tasks need at least one weekday")
        if self.recurring_days and any(day < 0 or day > 6 for day in self.recurring_days):
            raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
        if self.recurring_end_type == RecurringEndType.AFTER and self.recurring_end_count is None:
            raise ValueError("Series ending 'after' need an end count")
        return self


class TaskCreateRequest(RecurrenceFields):
    """Request body for creating a task."""
    name: str = Field(..., min_length=3, max_length=100)
    category: CategoryRequest
    due_date: date
    importance: Importance = Importance.NOT_IMPORTANT
    urgency: Urgency = Urgency.NOT_URGENT
    estimated_hours: float = Field(1.0, ge=MIN_ESTIMATED_HOURS, le=MAX_ESTIMATED_HOURS)


class TaskUpdateRequest(RecurrenceFields):
    """Request body for editing a task; recurrence fields replace the current ones."""
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    due_date: Optional[date] = None
    importance: Optional[Importance] = None
    urgency: Optional[Urgency] = None
    estimated_hours: Optional[float] = Field(None, ge=MIN_ESTIMATED_HOURS, le=MAX_ESTIMATED_HOURS)


# Response models
class TaskListResponse(BaseModel):
    tasks: List[Task]


class TaskCreateResponse(BaseModel):
    """Response for task creation."""
    task: Task
    check: CategoryLimitCheck


class TaskResponse(BaseModel):
    task: Task


class CompletionResponse(BaseModel):
    """Response for task completion."""
    task: Task
    next_occurrence: Optional[Task] = None
    streak: StreakState


class ScheduleResponse(BaseModel):
    """Response for a schedule recompute."""
    reference_date: date
    tasks: List[Task]
    overflow_tasks: List[Task]
    dropped_duplicates: List[Task]
    created_occurrences: List[Task]


class TodayResponse(BaseModel):
    day: date
    tasks: List[Task]
    completed: List[Task]


class StreakResponse(BaseModel):
    streak: StreakState
    next_milestone: Optional[int] = None


def _reference_day(today: Optional[date]) -> datetime:
    return normalize_date(today or datetime.now())


def _recompute_and_save(
    repo: UserStateRepository,
    user_id: str,
    tasks: List[Task],
    preferences: UserPreferences,
    today: datetime,
) -> SchedulingResult:
    result = recompute_schedule(
        tasks,
        preferences=preferences,
        today=today,
        max_per_day=MAX_TASKS_PER_DAY,
        horizon_days=HORIZON_DAYS,
    )
    repo.save_tasks(user_id, result.tasks)
    return result


def _find(tasks: List[Task], task_id: str) -> Task:
    for task in tasks:
        if task.id == task_id:
            return task
    raise HTTPException(status_code=404, detail=f"Task {task_id} not found")


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/tasks", response_model=TaskListResponse)
async def list_tasks(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List all stored tasks for the caller."""
    return TaskListResponse(tasks=UserStateRepository(db).load_tasks(user_id))


@app.post("/tasks", response_model=TaskCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    request: TaskCreateRequest,
    today: Optional[date] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a task, subject to the category daily limit."""
    repo = UserStateRepository(db)
    state = repo.load(user_id)
    reference = _reference_day(today)

    category = Category(**request.category.model_dump())
    new_task = create_task_base(
        name=request.name.strip(),
        category=category,
        due_date=request.due_date,
        importance=request.importance,
        urgency=request.urgency,
        estimated_hours=request.estimated_hours,
        is_recurring=request.is_recurring,
        recurring_interval=request.recurring_interval,
        recurring_days=request.recurring_days,
        recurring_end_type=request.recurring_end_type,
        recurring_end_count=request.recurring_end_count,
    )

    tasks, check = add_task(state.tasks, new_task, reference)
    if not check.allowed:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=check.message)

    if all(existing.id != category.id for existing in state.categories):
        repo.save_categories(user_id, state.categories + [category])

    result = _recompute_and_save(repo, user_id, tasks, state.preferences, reference)
    return TaskCreateResponse(task=_find(result.tasks, new_task.id), check=check)


@app.put("/tasks/{task_id}", response_model=TaskResponse)
async def edit_task(
    task_id: str,
    request: TaskUpdateRequest,
    today: Optional[date] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Edit a task; recurrence changes apply to the whole series."""
    repo = UserStateRepository(db)
    state = repo.load(user_id)
    reference = _reference_day(today)
    current = _find(state.tasks, task_id)

    changes: Dict[str, Any] = request.model_dump(exclude_unset=True)
    if "due_date" in changes:
        changes["due_date"] = normalize_date(changes["due_date"])
    if "recurring_days" in changes and changes["recurring_days"]:
        changes["recurring_days"] = sorted(set(changes["recurring_days"]))
    if changes.get("is_recurring") is False:
        changes.update(recurring_interval=None, recurring_days=None,
                       recurring_end_type=None, recurring_end_count=None)

    updated = current.model_copy(update=changes)
    try:
        tasks = update_task(state.tasks, Task.model_validate(updated.model_dump()), reference)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    result = _recompute_and_save(repo, user_id, tasks, state.preferences, reference)
    return TaskResponse(task=_find(result.tasks, task_id))


@app.post("/tasks/{task_id}/complete", response_model=CompletionResponse)
async def complete(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Complete a task, queue its next occurrence and update the streak."""
    repo = UserStateRepository(db)
    state = repo.load(user_id)
    now = datetime.now()

    try:
        outcome = complete_task(state.tasks, state.streak, task_id, now)
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    _recompute_and_save(repo, user_id, outcome.tasks, state.preferences, normalize_date(now))
    repo.save_streak(user_id, outcome.streak)
    return CompletionResponse(
        task=outcome.completed,
        next_occurrence=outcome.next_occurrence,
        streak=outcome.streak,
    )


@app.post("/schedule", response_model=ScheduleResponse)
async def build_schedule(
    today: Optional[date] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Recompute the schedule (expand recurrences, assign start days) and persist it."""
    repo = UserStateRepository(db)
    state = repo.load(user_id)
    reference = _reference_day(today)
    result = _recompute_and_save(repo, user_id, state.tasks, state.preferences, reference)
    return ScheduleResponse(
        reference_date=reference.date(),
        tasks=result.tasks,
        overflow_tasks=result.overflow_tasks,
        dropped_duplicates=result.dropped_duplicates,
        created_occurrences=result.created_occurrences,
    )


@app.get("/schedule/today", response_model=TodayResponse)
async def view_today(
    today: Optional[date] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Tasks whose start day is today, highest priority first."""
    reference = _reference_day(today)
    key = date_key(reference)
    tasks = UserStateRepository(db).load_tasks(user_id)
    on_today = [task for task in tasks if date_key(task.start_date or task.due_date) == key]
    return TodayResponse(
        day=reference.date(),
        tasks=prioritize_tasks(on_today, reference),
        completed=[task for task in on_today if task.completed],
    )


@app.get("/preferences", response_model=UserPreferences)
async def get_preferences(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return UserStateRepository(db).load_preferences(user_id)


@app.put("/preferences", response_model=UserPreferences)
async def put_preferences(
    payload: Dict[str, Any],
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Replace preferences; loosely typed payloads are normalized before saving."""
    preferences = normalize_preferences(payload)
    UserStateRepository(db).save_preferences(user_id, preferences)
    return preferences


@app.get("/streak", response_model=StreakResponse)
async def get_streak(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    streak = UserStateRepository(db).load_streak(user_id)
    return StreakResponse(streak=streak, next_milestone=get_next_milestone(streak.current_streak))


@app.put("/streak", response_model=StreakResponse)
async def sync_streak(
    incoming: StreakState,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Reconcile a streak kept by an offline client with the stored one."""
    repo = UserStateRepository(db)
    streak = merge_streak_states(repo.load_streak(user_id), incoming)
    repo.save_streak(user_id, streak)
    return StreakResponse(streak=streak, next_milestone=get_next_milestone(streak.current_streak))


@app.post("/streak/dismiss", response_model=StreakResponse)
async def dismiss_celebration(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Dismiss the pending milestone celebration."""
    repo = UserStateRepository(db)
    streak = clear_streak_celebration(repo.load_streak(user_id))
    repo.save_streak(user_id, streak)
    return StreakResponse(streak=streak, next_milestone=get_next_milestone(streak.current_streak))
