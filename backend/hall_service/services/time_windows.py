"""Helpers for HH:MM time-of-day windows."""

import re
from decimal import Decimal
from datetime import date, datetime, time, timedelta
from typing import Tuple

from ..utils.errors import ValidationError

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

Window = Tuple[int, int]


def is_valid_time(value) -> bool:
    return isinstance(value, str) and bool(_HHMM.match(value))


def time_to_minutes(value: str, field: str = "time") -> int:
    """Convert ``HH:MM`` to minutes since midnight."""
    match = _HHMM.match(value or "") if isinstance(value, str) else None
    if not match:
        raise ValidationError(
            f"Invalid time '{value}', expected HH:MM",
            {field: "invalid_format"},
        )
    return int(match.group(1)) * 60 + int(match.group(2))


def window(start_time: str, end_time: str) -> Window:
    start = time_to_minutes(start_time, "start_time")
    end = time_to_minutes(end_time, "end_time")
    if end <= start:
        raise ValidationError(
            "End time must be after start time",
            {"end_time": "must_be_after_start_time"},
        )
    return start, end


def overlaps(a: Window, b: Window) -> bool:
    """Half-open interval overlap: [s1, e1) and [s2, e2)."""
    return a[0] < b[1] and b[0] < a[1]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def combine(day: date, hhmm: str) -> datetime:
    minutes = time_to_minutes(hhmm)
    return datetime.combine(day, time(minutes // 60, minutes % 60))


def window_hours(start_time: str, end_time: str) -> Decimal:
    start, end = window(start_time, end_time)
    return (Decimal(end - start) / Decimal(60)).quantize(Decimal("0.01"))


def date_span(start: date, end: date):
    """Yield each calendar day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
