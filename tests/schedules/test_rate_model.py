from datetime import datetime, time

import pytest

from src.attendance_engine.attendance_engine.core.enums import CycleType, PeriodType, RangeType, ScheduleType
from src.attendance_engine.attendance_engine.core.exceptions import ScheduleConfigurationError
from src.attendance_engine.attendance_engine.schedules.rate_model import (
    build_schedule,
    build_time_range,
    build_work_cycle,
    resolve_rate,
)


def _day(periods, **extra):
    payload = {"label": "Day", "startTime": "08:00", "endTime": "17:00", "periods": periods}
    payload.update(extra)
    return payload


def test_theoretical_hours_skip_break_periods(standard_schedule):
    assert standard_schedule.theoretical_day_hours == pytest.approx(8.0)
    assert [p.name for p in standard_schedule.periods] == ["Morning", "Lunch", "Afternoon"]
    assert standard_schedule.periods[1].period_type is PeriodType.BREAK


def test_theoretical_hours_fall_back_to_window_minus_break():
    schedule = build_schedule(_day([], breakDuration=60))
    assert schedule.theoretical_day_hours == pytest.approx(8.0)
    assert schedule.schedule_type is ScheduleType.FIXED


def test_explicit_theoretical_hours_win():
    schedule = build_schedule(_day([], theoreticalDayHours=7.5))
    assert schedule.theoretical_day_hours == 7.5


def test_overlapping_periods_rejected():
    periods = [
        {"name": "A", "startTime": "08:00", "endTime": "12:00"},
        {"name": "B", "startTime": "11:00", "endTime": "13:00"},
    ]
    with pytest.raises(ScheduleConfigurationError, match="overlaps"):
        build_schedule(_day(periods))


def test_range_outside_its_period_rejected():
    periods = [
        {
            "name": "Morning",
            "startTime": "08:00",
            "endTime": "12:00",
            "timeRanges": [{"startTime": "11:00", "endTime": "13:00", "rangeType": "OVERTIME"}],
        }
    ]
    with pytest.raises(ScheduleConfigurationError, match="outside"):
        build_schedule(_day(periods))


def test_zero_length_range_rejected():
    with pytest.raises(ScheduleConfigurationError):
        build_time_range({"startTime": "10:00", "endTime": "10:00"})


def test_non_finite_numbers_rejected():
    with pytest.raises(ScheduleConfigurationError):
        build_time_range({"startTime": "18:00", "endTime": "20:00", "multiplier": "nan"})
    with pytest.raises(ScheduleConfigurationError):
        build_schedule(_day([], breakDuration=float("inf")))


def test_unknown_enum_value_is_a_configuration_error():
    with pytest.raises(ScheduleConfigurationError):
        build_time_range({"startTime": "10:00", "endTime": "11:00", "rangeType": "WHENEVER"})


def test_missing_label_rejected():
    with pytest.raises(ScheduleConfigurationError):
        build_schedule({"startTime": "08:00", "endTime": "17:00"})


def test_range_multiplier_defaults_by_type():
    r = build_time_range({"startTime": "18:00", "endTime": "20:00", "rangeType": "HEURE_SUPPLEMENTAIRE"})
    assert r.range_type is RangeType.OVERTIME
    assert r.multiplier == 1.25
    assert build_time_range({"startTime": "18:00", "endTime": "20:00", "rangeType": "SPECIAL"}).multiplier == 1.5
    assert build_time_range({"startTime": "18:00", "endTime": "20:00", "multiplier": 3}).multiplier == 3.0


def test_resolve_rate_inside_range_period_and_outside(standard_schedule):
    late = resolve_rate(standard_schedule, time(16, 30))
    assert late.period.name == "Afternoon"
    assert late.time_range.name == "Late afternoon"
    assert late.multiplier == 1.25

    morning = resolve_rate(standard_schedule, datetime(2024, 3, 4, 9, 0))
    assert morning.period.name == "Morning"
    assert morning.time_range is None
    assert morning.multiplier == 1.0

    lunch = resolve_rate(standard_schedule, time(12, 30))
    assert lunch.period.period_type is PeriodType.BREAK

    assert resolve_rate(standard_schedule, time(18, 0)) is None


def test_range_crossing_midnight(night_schedule):
    night_range = night_schedule.periods[0].time_ranges[0]
    assert night_range.crosses_midnight
    assert night_range.duration_hours == pytest.approx(8.0)
    assert night_schedule.theoretical_day_hours == pytest.approx(8.0)

    assert resolve_rate(night_schedule, time(23, 0)).multiplier == 1.5
    assert resolve_rate(night_schedule, time(2, 0)).multiplier == 1.5
    assert resolve_rate(night_schedule, time(6, 0)) is None
    assert resolve_rate(night_schedule, time(12, 0)) is None


def test_work_cycle_defaults_days_from_type():
    cycle = build_work_cycle({"name": "Two weeks", "cycleType": "BIHEBDOMADAIRE", "weeklyHours": 35, "scheduleId": 1})
    assert cycle.cycle_type is CycleType.BIWEEKLY
    assert cycle.cycle_days == 14
    assert cycle.schedule_id == 1


def test_custom_cycle_needs_explicit_days():
    with pytest.raises(ScheduleConfigurationError):
        build_work_cycle({"name": "Odd", "cycleType": "CUSTOM", "weeklyHours": 35, "scheduleId": 1})

    cycle = build_work_cycle({"name": "Odd", "cycleType": "CUSTOM", "cycleDays": 10, "weeklyHours": 35, "scheduleId": 1})
    assert cycle.cycle_days == 10


def test_work_cycle_requires_schedule():
    with pytest.raises(ScheduleConfigurationError):
        build_work_cycle({"name": "Weekly", "weeklyHours": 40})
