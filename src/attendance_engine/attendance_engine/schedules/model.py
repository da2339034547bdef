from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional

from ..core.constants import MINUTES_PER_DAY
from ..core.enums import CycleType, PeriodType, RangeType, ScheduleType


def clock_interval(start: time, end: time) -> tuple[int, int]:
    """Minute interval [start, end) on a 0..2880 axis; end < start crosses midnight."""

    s = start.hour * 60 + start.minute
    e = end.hour * 60 + end.minute
    if e <= s:
        e += MINUTES_PER_DAY
    return s, e


def interval_contains(interval: tuple[int, int], minute: int) -> bool:
    s, e = interval
    return s <= minute < e or s <= minute + MINUTES_PER_DAY < e


def _fmt(t: time) -> str:
    return t.strftime("%H:%M")


@dataclass(frozen=True)
class TimeRange:
    """Smallest rate unit: a sub-interval of the day with a pay multiplier."""

    name: str
    start_time: time
    end_time: time
    range_type: RangeType
    multiplier: float

    @property
    def crosses_midnight(self) -> bool:
        return self.end_time < self.start_time

    @property
    def interval(self) -> tuple[int, int]:
        return clock_interval(self.start_time, self.end_time)

    @property
    def duration_hours(self) -> float:
        s, e = self.interval
        return (e - s) / 60.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "startTime": _fmt(self.start_time),
            "endTime": _fmt(self.end_time),
            "rangeType": self.range_type.value,
            "multiplier": self.multiplier,
            "crossesMidnight": self.crosses_midnight,
        }


@dataclass(frozen=True)
class Period:
    """Named sub-window of a Schedule, owned by it."""

    name: str
    start_time: time
    end_time: time
    period_type: PeriodType
    time_ranges: tuple[TimeRange, ...] = ()

    @property
    def interval(self) -> tuple[int, int]:
        return clock_interval(self.start_time, self.end_time)

    @property
    def duration_hours(self) -> float:
        s, e = self.interval
        return (e - s) / 60.0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "startTime": _fmt(self.start_time),
            "endTime": _fmt(self.end_time),
            "periodType": self.period_type.value,
            "timeRanges": [r.to_dict() for r in self.time_ranges],
        }


@dataclass(frozen=True)
class Schedule:
    """Nominal workday template. Periods are owned values; ids reference it."""

    schedule_id: Optional[int]
    label: str
    schedule_type: ScheduleType
    start_time: time
    end_time: time
    theoretical_day_hours: float
    periods: tuple[Period, ...] = ()
    abbreviation: Optional[str] = None
    break_minutes: int = 0
    theoretical_morning_hours: Optional[float] = None
    theoretical_afternoon_hours: Optional[float] = None

    @property
    def interval(self) -> tuple[int, int]:
        return clock_interval(self.start_time, self.end_time)

    def to_dict(self) -> dict:
        return {
            "id": self.schedule_id,
            "label": self.label,
            "abbreviation": self.abbreviation,
            "scheduleType": self.schedule_type.value,
            "startTime": _fmt(self.start_time),
            "endTime": _fmt(self.end_time),
            "breakDuration": self.break_minutes,
            "theoreticalDayHours": round(self.theoretical_day_hours, 2),
            "theoreticalMorningHours": self.theoretical_morning_hours,
            "theoreticalAfternoonHours": self.theoretical_afternoon_hours,
            "periods": [p.to_dict() for p in self.periods],
        }


@dataclass(frozen=True)
class WorkCycle:
    """Recurrence + target hours around a Schedule (shared by many employees)."""

    cycle_id: Optional[int]
    name: str
    cycle_type: CycleType
    cycle_days: int
    weekly_hours: float
    schedule_id: int
    overtime_threshold: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "id": self.cycle_id,
            "name": self.name,
            "cycleType": self.cycle_type.value,
            "cycleDays": self.cycle_days,
            "weeklyHours": self.weekly_hours,
            "overtimeThreshold": self.overtime_threshold,
            "scheduleId": self.schedule_id,
        }


@dataclass(frozen=True)
class RateResolution:
    period: Period
    time_range: Optional[TimeRange]
    multiplier: float

    def to_dict(self) -> dict:
        return {
            "period": self.period.name,
            "periodType": self.period.period_type.value,
            "timeRange": self.time_range.name if self.time_range else None,
            "multiplier": self.multiplier,
        }
