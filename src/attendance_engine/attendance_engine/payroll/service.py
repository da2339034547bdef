from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Union

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import inclusive_days, month_bounds, parse_iso_date, working_days
from ..common.validators import clamp
from ..core.constants import EFFICIENCY_CEILING, EFFICIENCY_FLOOR
from ..core.enums import ApprovalStatus, TimeEntryStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import AccessPolicy, Actor, Capability, RoleAccessPolicy, require
from ..employees.repository import EmployeeRepository
from ..requests.model import Absence
from ..requests.repository import RequestRepository
from ..schedules.assignments import schedule_for
from ..schedules.repository import ScheduleRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payslip, PayslipSummary, PeriodSummary, TimeBalance

logger = logging.getLogger(__name__)

DateInput = Union[date, str]


def as_window(start: DateInput, end: DateInput) -> tuple[date, date]:
    start_d = start if isinstance(start, date) else parse_iso_date(start)
    end_d = end if isinstance(end, date) else parse_iso_date(end)
    if end_d < start_d:
        raise ValidationError("End date must be >= start date")
    return start_d, end_d


def efficiency(worked: float, theoretical: float) -> float:
    """worked / theoretical as a percentage, clamped; 0 without a target."""

    if theoretical <= 0:
        return 0.0
    return clamp(worked / theoretical * 100.0, EFFICIENCY_FLOOR, EFFICIENCY_CEILING)


def absence_days_within(absence: Absence, start: date, end: date) -> float:
    """Days of ``absence`` falling inside [start, end]."""

    overlap = inclusive_days(max(start, absence.start_date), min(end, absence.end_date))
    if overlap <= 0:
        return 0.0
    if overlap == inclusive_days(absence.start_date, absence.end_date):
        return float(absence.days)
    return min(float(absence.days), float(overlap))


def absence_working_days_within(absence: Absence, start: date, end: date) -> float:
    lo, hi = max(start, absence.start_date), min(end, absence.end_date)
    if hi < lo:
        return 0.0
    return min(float(absence.days), float(working_days(lo, hi)))


def counted_absences(absences: Iterable[Absence]) -> list[Absence]:
    return [a for a in absences if a.status != ApprovalStatus.REJECTED]


class PayrollService:
    """Read-only aggregation over time entries and requests.

    The reference window is always passed in explicitly. Figures stay
    unrounded here; rounding happens in ``to_dict``.
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
    ):
        self._entries = entries
        self._requests = requests
        self._employees = employees
        self._schedules = schedules
        self._policy = policy or RoleAccessPolicy()
        self._calculator = calculator or StandardPayrollCalculator()

    def period_summary(
        self,
        actor: Actor,
        *,
        start: DateInput,
        end: DateInput,
        employee_id: Optional[int] = None,
    ) -> PeriodSummary:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REPORT)
        start_d, end_d = as_window(start, end)

        emp = int(employee_id) if employee_id is not None else None
        entries = self._entries.find_by_date_range(start_date=start_d, end_date=end_d, employee_id=emp)
        absences = counted_absences(self._requests.find_absences(employee_id=emp, start_date=start_d, end_date=end_d))

        return PeriodSummary(
            start=start_d,
            end=end_d,
            employee_id=emp,
            total_time_entries=len(entries),
            total_hours=sum(self._calculator.worked_hours(e) for e in entries),
            total_absences=len(absences),
            total_absence_days=sum(absence_days_within(a, start_d, end_d) for a in absences),
        )

    def monthly_report(self, actor: Actor, *, year: int, month: int, employee_id: Optional[int] = None) -> PeriodSummary:
        if not 1 <= int(month) <= 12:
            raise ValidationError("month must be between 1 and 12")
        start, end = month_bounds(int(year), int(month))
        return self.period_summary(actor, start=start, end=end, employee_id=employee_id)

    def payslip(self, actor: Actor, employee_id: int, *, start: DateInput, end: DateInput) -> Payslip:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REPORT)
        start_d, end_d = as_window(start, end)

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        schedule = schedule_for(employee, self._schedules)

        window = dict(employee_id=employee.employee_id, start_date=start_d, end_date=end_d)
        entries = sorted(self._entries.find_by_date_range(**window), key=lambda e: (e.work_date, e.entry_id))
        overtimes = [o for o in self._requests.find_overtimes(**window) if o.status == ApprovalStatus.APPROVED]
        specials = [s for s in self._requests.find_special_hours(**window) if s.status == ApprovalStatus.APPROVED]
        absences = counted_absences(self._requests.find_absences(**window))

        by_type: dict[str, float] = defaultdict(float)
        for s in specials:
            by_type[s.hour_type.value] += s.hours

        summary = PayslipSummary(
            total_hours=sum(self._calculator.worked_hours(e) for e in entries),
            total_overtime_hours=sum(o.hours for o in overtimes),
            total_special_hours=sum(s.hours for s in specials),
            total_absence_days=sum(absence_days_within(a, start_d, end_d) for a in absences),
            work_days=sum(1 for e in entries if e.status == TimeEntryStatus.COMPLETED),
            weighted_worked_hours=sum(self._calculator.weighted_hours(e, schedule) for e in entries),
            weighted_overtime_hours=sum(o.weighted_hours for o in overtimes),
            weighted_special_hours=sum(s.weighted_hours for s in specials),
            special_hours_by_type=dict(by_type),
        )
        logger.info("payslip employee=%s %s..%s hours=%.2f", employee.employee_id, start_d, end_d, summary.total_hours)

        return Payslip(
            employee=employee,
            start=start_d,
            end=end_d,
            entries=tuple(entries),
            overtimes=tuple(overtimes),
            special_hours=tuple(specials),
            absences=tuple(absences),
            summary=summary,
        )

    def time_balance(self, actor: Actor, employee_id: int, *, start: DateInput, end: DateInput) -> TimeBalance:
        """Worked vs theoretical hours; approved absences reduce the target."""

        require(self._policy, actor, employee_id=employee_id, capability=Capability.REPORT)
        start_d, end_d = as_window(start, end)

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        schedule = schedule_for(employee, self._schedules)

        window = dict(employee_id=employee.employee_id, start_date=start_d, end_date=end_d)
        worked = sum(self._calculator.worked_hours(e) for e in self._entries.find_by_date_range(**window))
        approved = [a for a in self._requests.find_absences(**window) if a.status == ApprovalStatus.APPROVED]
        absence_days = sum(absence_working_days_within(a, start_d, end_d) for a in approved)

        days = working_days(start_d, end_d)
        day_hours = schedule.theoretical_day_hours if schedule else 0.0
        return TimeBalance(
            employee_id=employee.employee_id,
            start=start_d,
            end=end_d,
            worked_hours=worked,
            theoretical_hours=day_hours * max(days - absence_days, 0.0),
            working_days=days,
            absence_days=absence_days,
        )
