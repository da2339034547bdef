from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Union

from ..core.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def as_naive_utc(value: datetime) -> datetime:
    """Timestamps are kept as naive UTC; aware values are converted, naive ones taken as UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_iso_datetime(value: Union[str, datetime]) -> datetime:
    if isinstance(value, datetime):
        return as_naive_utc(value)
    try:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid timestamp (ISO-8601): {value!r}")
    return as_naive_utc(parsed)


def parse_clock_time(value: Union[str, time]) -> time:
    """Parse HH:MM (or HH:MM:SS) into time."""
    if isinstance(value, time):
        return value
    v = (value or "").strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid time (HH:MM): {value!r}")


def to_utc_date(value: DateLike) -> date:
    """Calendar date of ``value`` normalized to UTC.

    Aware timestamps are converted to UTC first so that the same instant
    always lands on the same calendar day regardless of the caller's zone.
    """

    if isinstance(value, str):
        value = parse_iso_datetime(value) if len(value.strip()) > 10 else parse_iso_date(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def inclusive_days(start: DateLike, end: DateLike) -> int:
    """Inclusive day count between two UTC-normalized dates; 0 when end < start."""

    diff = (to_utc_date(end) - to_utc_date(start)).days
    if diff < 0:
        return 0
    return diff + 1


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def working_days(start: date, end: date) -> int:
    """Monday-Friday days in [start, end]."""
    return sum(1 for d in iter_days(start, end) if d.weekday() < 5)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def trailing_months(year: int, month: int, count: int) -> list[tuple[int, int]]:
    """``count`` (year, month) pairs ending with the given month, oldest first."""
    return [shift_month(year, month, -offset) for offset in range(count - 1, -1, -1)]


def hours_between(start: datetime, end: datetime) -> float:
    return (as_naive_utc(end) - as_naive_utc(start)).total_seconds() / 3600.0


def minutes_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def now_utc() -> datetime:
    """Current time as naive UTC, the same form every parsed timestamp takes.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
