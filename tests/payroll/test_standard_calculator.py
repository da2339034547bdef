from datetime import date, datetime

import pytest

from src.attendance_engine.attendance_engine.attendance.model import TimeEntry
from src.attendance_engine.attendance_engine.core.enums import TimeEntryStatus
from src.attendance_engine.attendance_engine.payroll.calculator.standard_calculator import StandardPayrollCalculator

DAY = date(2024, 3, 4)


def test_only_completed_entries_count(make_completed):
    calc = StandardPayrollCalculator()

    assert calc.worked_hours(make_completed(1, 1, DAY, "08:00", "17:00")) == pytest.approx(9.0)
    assert calc.worked_hours(make_completed(1, 1, DAY, "08:00", "17:00", status=TimeEntryStatus.INCOMPLETE)) == 0.0
    pending = TimeEntry(
        entry_id=1,
        employee_id=1,
        work_date=DAY,
        clock_in=datetime(2024, 3, 4, 8, 0),
        clock_out=None,
        total_hours=0.0,
        status=TimeEntryStatus.PENDING,
    )
    assert calc.worked_hours(pending) == 0.0


def test_worked_hours_never_negative(make_overridden):
    assert StandardPayrollCalculator().worked_hours(make_overridden(1, 1, DAY, -3.0)) == 0.0


def test_weighted_hours_follow_rate_model(make_completed, standard_schedule):
    calc = StandardPayrollCalculator()
    entry = make_completed(1, 1, DAY, "08:00", "17:00")

    # 4h morning + unpaid lunch + 3h afternoon + 1h at 1.25
    assert calc.weighted_hours(entry, standard_schedule) == pytest.approx(8.25)


def test_minutes_outside_every_period_paid_at_base_rate(make_completed, standard_schedule):
    entry = make_completed(1, 1, DAY, "17:00", "19:00")
    assert StandardPayrollCalculator().weighted_hours(entry, standard_schedule) == pytest.approx(2.0)


def test_weighted_hours_across_midnight(make_completed, night_schedule):
    entry = make_completed(
        1,
        1,
        DAY,
        "22:00",
        "23:00",
        clock_out=datetime(2024, 3, 5, 2, 0),
        total_hours=4.0,
    )
    assert StandardPayrollCalculator().weighted_hours(entry, night_schedule) == pytest.approx(6.0)


def test_weighted_hours_without_schedule_or_with_override(make_completed, make_overridden, standard_schedule):
    calc = StandardPayrollCalculator()
    assert calc.weighted_hours(make_completed(1, 1, DAY, "08:00", "17:00"), None) == pytest.approx(9.0)
    assert calc.weighted_hours(make_overridden(1, 1, DAY, 7.0), standard_schedule) == pytest.approx(7.0)
