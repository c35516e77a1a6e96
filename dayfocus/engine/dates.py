"""Calendar-day normalization for dayfocus.

Every comparison between task dates goes through these helpers. Two values
are the same day iff their day-keys (``YYYY-MM-DD`` in local time) match;
raw datetimes are never compared directly.

Invalid input (None, unparseable strings, unsupported types) yields None
instead of raising, so malformed persisted data degrades gracefully.
"""

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

from dateutil import parser as date_parser

DateLike = Union[datetime, date, str, None]


def normalize_date(value: DateLike, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Return a naive datetime at local midnight for the same calendar day.

    Aware datetimes are first converted to ``tz`` (or the system local zone).
    Naive datetimes are taken to already be local.
    """
    if value is None:
        return None

    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = date_parser.parse(value)
        except (ValueError, OverflowError, TypeError):
            return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz) if tz is not None else value.astimezone()
            value = value.replace(tzinfo=None)
        return value.replace(hour=0, minute=0, second=0, microsecond=0)

    if isinstance(value, date):
        return datetime.combine(value, time.min)

    return None


def date_key(value: DateLike, tz: Optional[tzinfo] = None) -> Optional[str]:
    """Canonical ``YYYY-MM-DD`` key for the day, or None for invalid input."""
    normalized = normalize_date(value, tz)
    if normalized is None:
        return None
    return normalized.date().isoformat()


def today(tz: Optional[tzinfo] = None) -> datetime:
    """Local midnight of the current day."""
    return normalize_date(datetime.now(tz) if tz is not None else datetime.now())


def is_same_day(a: DateLike, b: DateLike) -> bool:
    key = date_key(a)
    return key is not None and key == date_key(b)


def is_weekend(value: DateLike) -> bool:
    """True iff the normalized day is a Saturday or Sunday."""
    normalized = normalize_date(value)
    if normalized is None:
        return False
    return normalized.weekday() >= 5


def day_index(value: DateLike) -> Optional[int]:
    """Weekday index with Sunday=0 ... Saturday=6 (the recurring_days convention)."""
    normalized = normalize_date(value)
    if normalized is None:
        return None
    # Python weekday: Monday=0 ... Sunday=6
    return (normalized.weekday() + 1) % 7


def days_between(start: DateLike, end: DateLike) -> Optional[int]:
    """Calendar-day difference ``end - start``."""
    a = normalize_date(start)
    b = normalize_date(end)
    if a is None or b is None:
        return None
    return (b - a).days


def add_days(value: DateLike, days: int) -> Optional[datetime]:
    normalized = normalize_date(value)
    if normalized is None:
        return None
    return normalized + timedelta(days=days)


def parse_date_key(key: Optional[str]) -> Optional[datetime]:
    """Inverse of ``date_key``: local midnight for a ``YYYY-MM-DD`` string.

    Full timestamps written by older clients are accepted too.
    """
    if not key:
        return None
    try:
        return datetime.strptime(key, "%Y-%m-%d")
    except ValueError:
        return normalize_date(key)
