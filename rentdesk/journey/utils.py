"""Time and number coercion shared by the journey components."""

import math
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

DAY = timedelta(days=1)


def to_instant(value: Any) -> Optional[datetime]:
    """
    Coerce a stored value to an aware UTC datetime.
    Dates become midnight UTC; naive datetimes are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            value = date.fromisoformat(text)
        else:
            value = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    raise TypeError(f"Not a date or datetime: {value!r}")


def to_day(value: Any) -> Optional[date]:
    """Calendar day (UTC) of a stored date/datetime."""
    instant = to_instant(value)
    return instant.date() if instant else None


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def end_of_day_exclusive(day: date) -> datetime:
    """First instant after `day`; used as an open upper bound."""
    return start_of_day(day) + DAY


def days_between(first: datetime, second: datetime) -> int:
    """Whole days between two instants, truncating the absolute difference."""
    return int(abs(second - first) // DAY)


def as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def round_half_up(value: float) -> int:
    """Round to nearest integer, halves away from zero (2.5 -> 3)."""
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
