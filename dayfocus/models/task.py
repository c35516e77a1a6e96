"""Task data model for dayfocus."""

from datetime import datetime
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class Importance(str, Enum):
    """Importance axis of the Eisenhower matrix."""
    IMPORTANT = "important"
    NOT_IMPORTANT = "not-important"


class Urgency(str, Enum):
    """Urgency axis of the Eisenhower matrix."""
    URGENT = "urgent"
    NOT_URGENT = "not-urgent"


class EisenhowerQuadrant(str, Enum):
    """Eisenhower quadrant enumeration."""
    URGENT_IMPORTANT = "urgent-important"
    NOT_URGENT_IMPORTANT = "not-urgent-important"
    URGENT_NOT_IMPORTANT = "urgent-not-important"
    NOT_URGENT_NOT_IMPORTANT = "not-urgent-not-important"


class RecurringInterval(str, Enum):
    """Recurrence interval enumeration."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class RecurringEndType(str, Enum):
    """How a recurring series ends."""
    NEVER = "never"
    AFTER = "after"  # Ends after recurring_end_count occurrences


class Category(BaseModel):
    """Named bucket a task belongs to (embedded in tasks by value)."""

    id: str = Field(..., description="Category identifier")
    name: str = Field(..., description="Display name; also the key for hour limits")
    color: str = Field("#6b7280", description="Hex colour")
    icon: str = Field("tag", description="Icon name")
    daily_limit: int = Field(2, description="Max number of tasks per day (category limit gate)")


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    recurring_series_id: Optional[str] = Field(
        None, description="Shared by every occurrence of one recurring template (null for one-off/legacy tasks)"
    )
    name: str = Field(..., description="Task name")
    category: Category = Field(..., description="Category at time of assignment")
    importance: Importance = Field(Importance.NOT_IMPORTANT, description="Importance flag")
    urgency: Urgency = Field(Urgency.NOT_URGENT, description="Urgency flag")
    due_date: datetime = Field(..., description="Day the task is due (recurring: day the occurrence lands on)")
    estimated_hours: float = Field(1.0, ge=0.25, le=24, description="Estimated effort in hours")
    completed: bool = Field(False, description="Whether the task is completed")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")
    start_date: Optional[datetime] = Field(
        None, description="Day assigned by the scheduler (null until the first scheduling pass)"
    )

    # Recurrence
    is_recurring: bool = Field(False, description="Whether this task is a recurring template/occurrence")
    recurring_interval: Optional[RecurringInterval] = Field(None, description="Recurrence interval")
    recurring_days: Optional[List[int]] = Field(
        None, description="Weekly recurrence weekdays, Sunday=0 ... Saturday=6"
    )
    recurring_end_type: Optional[RecurringEndType] = Field(None, description="never / after")
    recurring_end_count: Optional[int] = Field(None, ge=1, description="Occurrences before the series ends")
    recurring_current_count: Optional[int] = Field(None, ge=0, description="Position of this occurrence in the series")

    @property
    def series_id(self) -> str:
        """Series identity, falling back to the task's own id for unmigrated data."""
        return self.recurring_series_id or self.id

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
