"""User preference models for dayfocus.

Preference payloads arrive loosely typed (numbers as strings, legacy ``{"max": n}``
objects, partial entries). They are normalized once, here, into strict models
before anything reaches the scheduler.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from dayfocus.models.constants import (
    DEFAULT_CATEGORY_LIMITS,
    DEFAULT_DAILY_MAX_HOURS_WEEKDAY,
    DEFAULT_DAILY_MAX_HOURS_WEEKEND,
    DEFAULT_HORIZON_DAYS,
    DEFAULT_MAX_TASKS_PER_DAY,
)

logger = logging.getLogger(__name__)


class CategoryHourLimit(BaseModel):
    """Hour budget for one category on weekdays and weekends."""

    weekday_max: float = Field(..., ge=0)
    weekend_max: float = Field(..., ge=0)

    def for_day(self, weekend: bool) -> float:
        return self.weekend_max if weekend else self.weekday_max


class DailyMaxHours(BaseModel):
    """Total estimated-hours budget per day across all categories."""

    weekday: float = Field(DEFAULT_DAILY_MAX_HOURS_WEEKDAY, ge=0)
    weekend: float = Field(DEFAULT_DAILY_MAX_HOURS_WEEKEND, ge=0)

    def for_day(self, weekend: bool) -> float:
        return self.weekend if weekend else self.weekday


def default_category_limits() -> Dict[str, CategoryHourLimit]:
    return {
        name: CategoryHourLimit(weekday_max=weekday, weekend_max=weekend)
        for name, (weekday, weekend) in DEFAULT_CATEGORY_LIMITS.items()
    }


class UserPreferences(BaseModel):
    """Scheduling preferences for a single user."""

    max_daily_tasks: int = Field(DEFAULT_MAX_TASKS_PER_DAY, ge=1)
    horizon_days: int = Field(DEFAULT_HORIZON_DAYS, ge=1)
    category_limits: Dict[str, CategoryHourLimit] = Field(default_factory=default_category_limits)
    daily_max_hours: DailyMaxHours = Field(default_factory=DailyMaxHours)

    def category_cap(self, category_name: str, weekend: bool) -> float:
        """Hour cap for a category on a given kind of day (infinite when unconfigured)."""
        limit = self.category_limits.get(category_name)
        if limit is None:
            return float("inf")
        return limit.for_day(weekend)


def _to_number(value: Any) -> Optional[float]:
    """Coerce a loosely typed value to a non-negative float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number < 0:  # NaN or negative
        return None
    return number


def _pick(raw: Dict[str, Any], *keys: str) -> Optional[float]:
    for key in keys:
        if key in raw:
            number = _to_number(raw[key])
            if number is not None:
                return number
    return None


def normalize_category_limit(name: str, raw: Any) -> Optional[CategoryHourLimit]:
    """Normalize one category's hour limit.

    Accepts a bare number, ``{"max": n}`` (legacy), or ``{"weekdayMax": .., "weekendMax": ..}``
    in either camelCase or snake_case. A missing weekend value falls back to the weekday value;
    a missing weekday value falls back to the system default for that category name.
    """
    default = DEFAULT_CATEGORY_LIMITS.get(name)

    if isinstance(raw, CategoryHourLimit):
        return raw

    weekday: Optional[float]
    weekend: Optional[float]
    if isinstance(raw, dict):
        weekday = _pick(raw, "weekday_max", "weekdayMax", "max")
        weekend = _pick(raw, "weekend_max", "weekendMax")
    else:
        weekday = _to_number(raw)
        weekend = None

    if weekday is None:
        if default is None:
            return None
        weekday = default[0]
        if weekend is None:
            weekend = default[1]
    if weekend is None:
        weekend = weekday
    return CategoryHourLimit(weekday_max=weekday, weekend_max=weekend)


def normalize_category_limits(raw: Any) -> Dict[str, CategoryHourLimit]:
    """Normalize a whole ``categoryLimits`` map.

    Absent categories fall back to the system defaults. Unusable entries are dropped
    with a warning rather than raising.
    """
    limits = default_category_limits()
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning(f"Ignoring category limits of unexpected type {type(raw).__name__}")
        return limits

    for name, value in raw.items():
        limit = normalize_category_limit(str(name), value)
        if limit is None:
            logger.warning(f"Dropping unusable hour limit for category {name!r}")
            continue
        limits[str(name)] = limit
    return limits


def normalize_preferences(raw: Any) -> UserPreferences:
    """Normalize a loosely typed preferences payload into UserPreferences."""
    if isinstance(raw, UserPreferences):
        return raw
    if not isinstance(raw, dict):
        return UserPreferences()

    max_daily = _pick(raw, "max_daily_tasks", "maxDailyTasks")
    horizon = _pick(raw, "horizon_days", "horizonDays")

    daily_raw = raw.get("daily_max_hours", raw.get("dailyMaxHours"))
    daily = DailyMaxHours()
    if isinstance(daily_raw, dict):
        weekday = _pick(daily_raw, "weekday")
        weekend = _pick(daily_raw, "weekend")
        daily = DailyMaxHours(
            weekday=weekday if weekday is not None else daily.weekday,
            weekend=weekend if weekend is not None else daily.weekend,
        )

    return UserPreferences(
        max_daily_tasks=int(max_daily) if max_daily and max_daily >= 1 else DEFAULT_MAX_TASKS_PER_DAY,
        horizon_days=int(horizon) if horizon and horizon >= 1 else DEFAULT_HORIZON_DAYS,
        category_limits=normalize_category_limits(raw.get("category_limits", raw.get("categoryLimits"))),
        daily_max_hours=daily,
    )
