from datetime import date, timedelta

import pytest

from src.attendance_engine.attendance_engine.core.enums import ApprovalStatus, EmployeeStatus
from src.attendance_engine.attendance_engine.core.exceptions import AuthorizationError, ValidationError
from src.attendance_engine.attendance_engine.employees.model import Employee
from src.attendance_engine.attendance_engine.payroll.dashboard import DashboardService
from src.attendance_engine.attendance_engine.requests.model import Overtime


def _weekdays(year, month):
    day = date(year, month, 1)
    while day.month == month:
        if day.weekday() < 5:
            yield day
        day += timedelta(days=1)


@pytest.fixture
def april(engine, make_overridden):
    """Alice works 150h and Bruno 100h in April 2024; Chloe is inactive."""

    engine.employees.add(
        Employee(employee_id=3, employee_number="E003", first_name="Chloe", last_name="Petit", status=EmployeeStatus.INACTIVE)
    )
    days = list(_weekdays(2024, 4))
    entry_id = 1
    for day in days[:15]:
        engine.entries.add(make_overridden(entry_id, 1, day, 10.0))
        entry_id += 1
    for day in days[:10]:
        engine.entries.add(make_overridden(entry_id, 2, day, 10.0))
        entry_id += 1
    engine.entries.add(make_overridden(entry_id, 1, date(2024, 3, 4), 8.0))
    engine.requests.add_overtime(
        Overtime(
            overtime_id=1,
            employee_id=2,
            work_date=date(2024, 4, 2),
            hours=1.0,
            multiplier=1.25,
            status=ApprovalStatus.PENDING,
        )
    )
    return engine


def test_monthly_figures(april, admin):
    stats = april.container.dashboard_service.dashboard_statistics(admin, year=2024, month=4)

    assert stats.total_employees == 3
    assert stats.employees_by_status == {"ACTIVE": 2, "INACTIVE": 1}
    assert stats.employees_by_gender == {"FEMALE": 1, "MALE": 1, "UNKNOWN": 1}
    assert stats.total_worked_hours == pytest.approx(250.0)
    assert stats.total_theoretical_hours == pytest.approx(352.0)
    assert stats.efficiency == pytest.approx(250.0 / 352.0 * 100.0)
    assert (stats.pending_absences, stats.pending_overtimes, stats.pending_special_hours) == (0, 1, 0)


def test_top_employees_ranked_by_worked_hours(april, admin):
    stats = april.container.dashboard_service.dashboard_statistics(admin, year=2024, month=4)

    top = [p.to_dict() for p in stats.top_employees]
    assert [p["employeeId"] for p in top] == [1, 2]
    assert top[0]["fullName"] == "Alice Martin"
    assert top[0]["efficiency"] == 85.2

    only_one = april.container.dashboard_service.dashboard_statistics(admin, year=2024, month=4, top_n=1)
    assert len(only_one.top_employees) == 1


def test_trend_covers_trailing_months(april, admin):
    stats = april.container.dashboard_service.dashboard_statistics(admin, year=2024, month=4)

    months = [t.to_dict()["month"] for t in stats.trend]
    assert months == ["2023-11", "2023-12", "2024-01", "2024-02", "2024-03", "2024-04"]
    assert stats.trend[-1].worked_hours == pytest.approx(250.0)
    assert stats.trend[-2].worked_hours == pytest.approx(8.0)


def test_failing_trend_month_reported_as_zeros(april, admin, monkeypatch):
    real = april.entries.find_by_date_range

    def flaky(*, start_date, end_date, employee_id=None):
        if start_date.month == 3:
            raise RuntimeError("store unavailable")
        return real(start_date=start_date, end_date=end_date, employee_id=employee_id)

    monkeypatch.setattr(april.entries, "find_by_date_range", flaky)
    stats = april.container.dashboard_service.dashboard_statistics(admin, year=2024, month=4)

    march = stats.trend[-2]
    assert (march.year, march.month) == (2024, 3)
    assert march.worked_hours == 0.0 and march.efficiency == 0.0
    assert stats.trend[-1].worked_hours == pytest.approx(250.0)


def test_trend_length_is_configurable(april, admin):
    service = DashboardService(
        april.entries, april.requests, april.employees, april.schedules, trend_months=3
    )
    assert len(service.dashboard_statistics(admin, year=2024, month=1).trend) == 3


def test_dashboard_access_and_month(april, admin, employee_user):
    service = april.container.dashboard_service
    with pytest.raises(AuthorizationError):
        service.dashboard_statistics(employee_user, year=2024, month=4)
    with pytest.raises(ValidationError):
        service.dashboard_statistics(admin, year=2024, month=0)
