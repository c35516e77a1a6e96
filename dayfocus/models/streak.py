"""Streak state model for dayfocus."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from dayfocus.models.constants import INITIAL_FREEZE_TOKENS


class StreakCelebration(BaseModel):
    """Milestone reached by the streak, shown until explicitly dismissed."""

    streak: int = Field(..., description="Streak length that triggered the celebration")
    achieved_at: datetime = Field(..., description="When the celebration triggered")


class StreakState(BaseModel):
    """Consecutive-day completion streak for a user."""

    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    freeze_tokens: int = Field(INITIAL_FREEZE_TOKENS, ge=0, description="Grace uses available")
    last_completed_date: Optional[str] = Field(None, description="Day-key (YYYY-MM-DD) of the last completion")
    freeze_used_on: Optional[str] = Field(None, description="Day-key on which a freeze was last consumed")
    milestone_celebration: Optional[StreakCelebration] = None


def default_streak_state() -> StreakState:
    """Fresh streak: nothing completed yet, one free freeze token."""
    return StreakState()
