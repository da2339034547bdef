"""Rate model: build and query Schedule -> Period -> TimeRange definitions.

Definitions arrive as plain records (times as "HH:MM", enums in either
vocabulary). Everything is checked here, at construction: overlapping
periods or ranges are rejected with ScheduleConfigurationError rather than
silently corrected. Intervals are handled in minutes modulo 24h so that a
range such as 22:00-06:00 is treated as crossing midnight.
"""

from __future__ import annotations

import math
from datetime import datetime, time
from typing import Any, Iterable, Mapping, Optional, Sequence, Type, TypeVar, Union

from ..common.datetime_utils import parse_clock_time
from ..common.payload import has, pick
from ..core.constants import (
    DEFAULT_CYCLE_DAYS,
    DEFAULT_PERIOD_MULTIPLIERS,
    DEFAULT_RANGE_MULTIPLIERS,
    MINUTES_PER_DAY,
)
from ..core.enums import CycleType, PeriodType, RangeType, ScheduleType, normalize_enum
from ..core.exceptions import ScheduleConfigurationError, ValidationError
from .model import Period, RateResolution, Schedule, TimeRange, WorkCycle, clock_interval, interval_contains

E = TypeVar("E")

_SHIFTS = (0, MINUTES_PER_DAY, -MINUTES_PER_DAY)


def _enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    try:
        return normalize_enum(enum_cls, value)  # type: ignore[arg-type]
    except ValidationError as e:
        raise ScheduleConfigurationError(f"{field_name}: {e}") from e


def _time(value: Any, field_name: str) -> time:
    if value is None:
        raise ScheduleConfigurationError(f"{field_name} is required")
    try:
        return parse_clock_time(value)
    except ValidationError as e:
        raise ScheduleConfigurationError(f"{field_name}: {e}") from e


def _number(value: Any, field_name: str, *, allow_zero: bool = False) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ScheduleConfigurationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ScheduleConfigurationError(f"{field_name} must be a finite number")
    if number < 0 or (number == 0 and not allow_zero):
        raise ScheduleConfigurationError(f"{field_name} must be {'>= 0' if allow_zero else '> 0'}")
    return number


def _name(payload: Mapping[str, Any], default: str) -> str:
    value = pick(payload, "name") or pick(payload, "label") or default
    return str(value).strip() or default


def intervals_overlap(a: tuple[int, int], b: tuple[int, int]) -> bool:
    return any(a[0] < b[1] + k and b[0] + k < a[1] for k in _SHIFTS)


def interval_within(inner: tuple[int, int], outer: tuple[int, int]) -> bool:
    return any(outer[0] <= inner[0] + k and inner[1] + k <= outer[1] for k in _SHIFTS)


def check_no_overlap(items: Sequence[Any], what: str) -> None:
    for i, left in enumerate(items):
        for right in items[i + 1 :]:
            if intervals_overlap(left.interval, right.interval):
                raise ScheduleConfigurationError(f"{what} '{left.name}' overlaps '{right.name}'")


def _check_length(start: time, end: time, what: str) -> None:
    if start == end:
        raise ScheduleConfigurationError(f"{what} has zero length ({start.strftime('%H:%M')})")


def build_time_range(payload: Mapping[str, Any]) -> TimeRange:
    start = _time(pick(payload, "start_time"), "TimeRange.startTime")
    end = _time(pick(payload, "end_time"), "TimeRange.endTime")
    _check_length(start, end, "TimeRange")

    range_type = _enum(RangeType, pick(payload, "range_type", RangeType.NORMAL), "TimeRange.rangeType")
    if has(payload, "multiplier"):
        multiplier = _number(pick(payload, "multiplier"), "TimeRange.multiplier")
    else:
        multiplier = DEFAULT_RANGE_MULTIPLIERS[range_type]

    return TimeRange(
        name=_name(payload, range_type.value.title()),
        start_time=start,
        end_time=end,
        range_type=range_type,
        multiplier=multiplier,
    )


def build_period(payload: Mapping[str, Any]) -> Period:
    start = _time(pick(payload, "start_time"), "Period.startTime")
    end = _time(pick(payload, "end_time"), "Period.endTime")
    _check_length(start, end, "Period")
    period_type = _enum(PeriodType, pick(payload, "period_type", PeriodType.REGULAR), "Period.periodType")

    ranges = tuple(build_time_range(r) for r in (pick(payload, "time_ranges") or ()))
    window = clock_interval(start, end)
    for r in ranges:
        if not interval_within(r.interval, window):
            raise ScheduleConfigurationError(f"TimeRange '{r.name}' lies outside its period")
    check_no_overlap(ranges, "TimeRange")

    return Period(
        name=_name(payload, period_type.value.title()),
        start_time=start,
        end_time=end,
        period_type=period_type,
        time_ranges=tuple(sorted(ranges, key=lambda r: (r.interval[0] - window[0]) % MINUTES_PER_DAY)),
    )


def theoretical_hours(periods: Iterable[Period], *, start: time, end: time, break_minutes: int) -> float:
    worked = [p for p in periods if p.period_type != PeriodType.BREAK]
    if worked:
        return sum(p.duration_hours for p in worked)
    s, e = clock_interval(start, end)
    return max((e - s - break_minutes) / 60.0, 0.0)


def build_schedule(payload: Mapping[str, Any], *, schedule_id: Optional[int] = None) -> Schedule:
    label = str(pick(payload, "label") or "").strip()
    if not label:
        raise ScheduleConfigurationError("Schedule.label is required")

    start = _time(pick(payload, "start_time"), "Schedule.startTime")
    end = _time(pick(payload, "end_time"), "Schedule.endTime")
    _check_length(start, end, "Schedule")

    break_minutes = int(_number(pick(payload, "break_duration", pick(payload, "break_minutes", 0)), "Schedule.breakDuration", allow_zero=True))
    periods = tuple(build_period(p) for p in (pick(payload, "periods") or ()))
    origin = clock_interval(start, end)[0]
    check_no_overlap(periods, "Period")

    if has(payload, "theoretical_day_hours"):
        day_hours = _number(pick(payload, "theoretical_day_hours"), "Schedule.theoreticalDayHours", allow_zero=True)
    else:
        day_hours = theoretical_hours(periods, start=start, end=end, break_minutes=break_minutes)

    def _optional_hours(name: str) -> Optional[float]:
        value = pick(payload, name)
        return None if value in (None, "") else _number(value, name, allow_zero=True)

    return Schedule(
        schedule_id=schedule_id,
        label=label,
        abbreviation=(str(pick(payload, "abbreviation") or "").strip() or None),
        schedule_type=_enum(ScheduleType, pick(payload, "schedule_type", ScheduleType.FIXED), "Schedule.scheduleType"),
        start_time=start,
        end_time=end,
        break_minutes=break_minutes,
        theoretical_day_hours=day_hours,
        theoretical_morning_hours=_optional_hours("theoretical_morning_hours"),
        theoretical_afternoon_hours=_optional_hours("theoretical_afternoon_hours"),
        periods=tuple(sorted(periods, key=lambda p: (p.interval[0] - origin) % MINUTES_PER_DAY)),
    )


def build_work_cycle(payload: Mapping[str, Any], *, cycle_id: Optional[int] = None) -> WorkCycle:
    name = str(pick(payload, "name") or "").strip()
    if not name:
        raise ScheduleConfigurationError("WorkCycle.name is required")

    cycle_type = _enum(CycleType, pick(payload, "cycle_type", CycleType.WEEKLY), "WorkCycle.cycleType")
    if has(payload, "cycle_days"):
        cycle_days = int(_number(pick(payload, "cycle_days"), "WorkCycle.cycleDays"))
    elif cycle_type in DEFAULT_CYCLE_DAYS:
        cycle_days = DEFAULT_CYCLE_DAYS[cycle_type]
    else:
        raise ScheduleConfigurationError("WorkCycle.cycleDays is required for CUSTOM cycles")

    weekly_hours = _number(pick(payload, "weekly_hours"), "WorkCycle.weeklyHours")
    threshold = pick(payload, "overtime_threshold")
    overtime_threshold = None if threshold in (None, "") else _number(threshold, "WorkCycle.overtimeThreshold")

    schedule_id = pick(payload, "schedule_id")
    if schedule_id is None:
        raise ScheduleConfigurationError("WorkCycle.scheduleId is required")

    return WorkCycle(
        cycle_id=cycle_id,
        name=name,
        cycle_type=cycle_type,
        cycle_days=cycle_days,
        weekly_hours=weekly_hours,
        overtime_threshold=overtime_threshold,
        schedule_id=int(schedule_id),
    )


def resolve_rate(schedule: Schedule, instant: Union[datetime, time]) -> Optional[RateResolution]:
    """Period/TimeRange in effect at a wall-clock instant, with its multiplier.

    Returns None outside every period. Inside a period without a covering
    range the period type's default multiplier applies.
    """

    at = instant.time() if isinstance(instant, datetime) else instant
    minute = at.hour * 60 + at.minute

    for period in schedule.periods:
        if not interval_contains(period.interval, minute):
            continue
        for time_range in period.time_ranges:
            if interval_contains(time_range.interval, minute):
                return RateResolution(period=period, time_range=time_range, multiplier=time_range.multiplier)
        return RateResolution(
            period=period,
            time_range=None,
            multiplier=DEFAULT_PERIOD_MULTIPLIERS[period.period_type],
        )
    return None
