from __future__ import annotations

import logging
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, trailing_months, working_days
from ..core.constants import DEFAULT_DASHBOARD_TOP_N, DEFAULT_TREND_MONTHS
from ..core.enums import ApprovalStatus, EmployeeStatus
from ..core.exceptions import ValidationError
from ..core.policy import AccessPolicy, Actor, Capability, RoleAccessPolicy, require
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..requests.repository import RequestRepository
from ..schedules.assignments import schedule_for
from ..schedules.repository import ScheduleRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import DashboardStatistics, EmployeePerformance, TrendPoint
from .service import efficiency

logger = logging.getLogger(__name__)


class DashboardService:
    """Monthly organisation-wide statistics for the manager dashboard.

    The theoretical target of an active employee is the day hours of the
    schedule behind their work cycle times the Monday-Friday days of the
    month. Trend months are computed independently in a thread pool; a month
    that fails to load is reported as zeros.
    """

    def __init__(
        self,
        entries: AttendanceRepository,
        requests: RequestRepository,
        employees: EmployeeRepository,
        schedules: ScheduleRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        calculator: Optional[PayrollCalculator] = None,
        top_n: int = DEFAULT_DASHBOARD_TOP_N,
        trend_months: int = DEFAULT_TREND_MONTHS,
    ):
        self._entries = entries
        self._requests = requests
        self._employees = employees
        self._schedules = schedules
        self._policy = policy or RoleAccessPolicy()
        self._calculator = calculator or StandardPayrollCalculator()
        self._top_n = int(top_n)
        self._trend_months = int(trend_months)

    def _day_hours(self, employees: list[Employee]) -> dict[int, float]:
        hours: dict[int, float] = {}
        for employee in employees:
            if employee.status != EmployeeStatus.ACTIVE:
                continue
            schedule = schedule_for(employee, self._schedules)
            hours[employee.employee_id] = schedule.theoretical_day_hours if schedule else 0.0
        return hours

    def _month_figures(self, year: int, month: int, day_hours: dict[int, float]) -> tuple[dict[int, float], dict[int, float]]:
        start, end = month_bounds(year, month)
        worked: dict[int, float] = defaultdict(float)
        for entry in self._entries.find_by_date_range(start_date=start, end_date=end):
            worked[entry.employee_id] += self._calculator.worked_hours(entry)

        days = working_days(start, end)
        theoretical = {employee_id: h * days for employee_id, h in day_hours.items()}
        return dict(worked), theoretical

    def _trend_point(self, year: int, month: int, day_hours: dict[int, float]) -> TrendPoint:
        worked, theoretical = self._month_figures(year, month, day_hours)
        total_worked = sum(worked.values())
        total_theoretical = sum(theoretical.values())
        return TrendPoint(
            year=year,
            month=month,
            worked_hours=total_worked,
            theoretical_hours=total_theoretical,
            efficiency=efficiency(total_worked, total_theoretical),
        )

    def _trend(self, year: int, month: int, day_hours: dict[int, float]) -> tuple[TrendPoint, ...]:
        months = trailing_months(year, month, self._trend_months)
        if not months:
            return ()

        with ThreadPoolExecutor(max_workers=len(months)) as pool:
            futures = [(y, m, pool.submit(self._trend_point, y, m, day_hours)) for y, m in months]

        points = []
        for y, m, future in futures:
            try:
                points.append(future.result())
            except Exception:
                logger.warning("trend month %04d-%02d failed, reporting zeros", y, m, exc_info=True)
                points.append(TrendPoint(year=y, month=m))
        return tuple(points)

    def dashboard_statistics(
        self,
        actor: Actor,
        *,
        year: int,
        month: int,
        top_n: Optional[int] = None,
    ) -> DashboardStatistics:
        require(self._policy, actor, employee_id=None, capability=Capability.REPORT)
        if not 1 <= int(month) <= 12:
            raise ValidationError("month must be between 1 and 12")
        year, month = int(year), int(month)

        employees = list(self._employees.list_all())
        names = {e.employee_id: e.full_name for e in employees}
        day_hours = self._day_hours(employees)
        worked, theoretical = self._month_figures(year, month, day_hours)

        total_worked = sum(worked.values())
        total_theoretical = sum(theoretical.values())

        performers = [
            EmployeePerformance(
                employee_id=employee_id,
                full_name=names.get(employee_id, ""),
                worked_hours=hours,
                theoretical_hours=theoretical.get(employee_id, 0.0),
                efficiency=efficiency(hours, theoretical.get(employee_id, 0.0)),
            )
            for employee_id, hours in worked.items()
        ]
        performers.sort(key=lambda p: (-p.worked_hours, p.employee_id))
        limit = self._top_n if top_n is None else max(int(top_n), 0)

        return DashboardStatistics(
            year=year,
            month=month,
            total_employees=len(employees),
            employees_by_status=dict(Counter(e.status.value for e in employees)),
            employees_by_gender=dict(Counter(e.gender.value for e in employees)),
            employees_by_contract=dict(Counter(e.contract_type.value for e in employees)),
            total_worked_hours=total_worked,
            total_theoretical_hours=total_theoretical,
            efficiency=efficiency(total_worked, total_theoretical),
            top_employees=tuple(performers[:limit]),
            pending_absences=len(self._requests.find_absences(status=ApprovalStatus.PENDING)),
            pending_overtimes=len(self._requests.find_overtimes(status=ApprovalStatus.PENDING)),
            pending_special_hours=len(self._requests.find_special_hours(status=ApprovalStatus.PENDING)),
            trend=self._trend(year, month, day_hours),
        )
