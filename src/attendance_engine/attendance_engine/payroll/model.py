from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..attendance.model import TimeEntry
from ..common.validators import round_hours
from ..employees.model import Employee
from ..requests.model import Absence, Overtime, SpecialHours


@dataclass(frozen=True)
class PeriodSummary:
    start: date
    end: date
    total_time_entries: int
    total_hours: float
    total_absences: int
    total_absence_days: float
    employee_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "period": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "employeeId": self.employee_id,
            "totalTimeEntries": self.total_time_entries,
            "totalHours": round_hours(self.total_hours),
            "totalAbsences": self.total_absences,
            "totalAbsenceDays": round_hours(self.total_absence_days),
        }


@dataclass(frozen=True)
class PayslipSummary:
    total_hours: float = 0.0
    total_overtime_hours: float = 0.0
    total_special_hours: float = 0.0
    total_absence_days: float = 0.0
    work_days: int = 0
    weighted_worked_hours: float = 0.0
    weighted_overtime_hours: float = 0.0
    weighted_special_hours: float = 0.0
    special_hours_by_type: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "totalHours": round_hours(self.total_hours),
            "totalOvertimeHours": round_hours(self.total_overtime_hours),
            "totalSpecialHours": round_hours(self.total_special_hours),
            "totalAbsenceDays": round_hours(self.total_absence_days),
            "workDays": self.work_days,
            "weightedWorkedHours": round_hours(self.weighted_worked_hours),
            "weightedOvertimeHours": round_hours(self.weighted_overtime_hours),
            "weightedSpecialHours": round_hours(self.weighted_special_hours),
            "specialHoursByType": {k: round_hours(v) for k, v in self.special_hours_by_type.items()},
        }


@dataclass(frozen=True)
class Payslip:
    employee: Employee
    start: date
    end: date
    entries: tuple[TimeEntry, ...]
    overtimes: tuple[Overtime, ...]
    special_hours: tuple[SpecialHours, ...]
    absences: tuple[Absence, ...]
    summary: PayslipSummary

    def to_dict(self) -> dict:
        return {
            "employee": self.employee.to_dict(),
            "period": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "timeEntries": [e.to_dict() for e in self.entries],
            "overtimes": [o.to_dict() for o in self.overtimes],
            "specialHours": [s.to_dict() for s in self.special_hours],
            "absences": [a.to_dict() for a in self.absences],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class TimeBalance:
    employee_id: int
    start: date
    end: date
    worked_hours: float
    theoretical_hours: float
    working_days: int
    absence_days: float

    @property
    def balance(self) -> float:
        return self.worked_hours - self.theoretical_hours

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "period": {"start": self.start.isoformat(), "end": self.end.isoformat()},
            "workedHours": round_hours(self.worked_hours),
            "theoreticalHours": round_hours(self.theoretical_hours),
            "workingDays": self.working_days,
            "absenceDays": round_hours(self.absence_days),
            "balance": round_hours(self.balance),
        }


@dataclass(frozen=True)
class EmployeePerformance:
    employee_id: int
    full_name: str
    worked_hours: float
    theoretical_hours: float
    efficiency: float

    def to_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "fullName": self.full_name,
            "workedHours": round_hours(self.worked_hours),
            "theoreticalHours": round_hours(self.theoretical_hours),
            "efficiency": round(self.efficiency, 1),
        }


@dataclass(frozen=True)
class TrendPoint:
    year: int
    month: int
    worked_hours: float = 0.0
    theoretical_hours: float = 0.0
    efficiency: float = 0.0

    def to_dict(self) -> dict:
        return {
            "month": f"{self.year:04d}-{self.month:02d}",
            "workedHours": round_hours(self.worked_hours),
            "theoreticalHours": round_hours(self.theoretical_hours),
            "efficiency": round(self.efficiency, 1),
        }


@dataclass(frozen=True)
class DashboardStatistics:
    year: int
    month: int
    total_employees: int
    employees_by_status: dict
    employees_by_gender: dict
    employees_by_contract: dict
    total_worked_hours: float
    total_theoretical_hours: float
    efficiency: float
    top_employees: tuple[EmployeePerformance, ...]
    pending_absences: int
    pending_overtimes: int
    pending_special_hours: int
    trend: tuple[TrendPoint, ...] = ()

    def to_dict(self) -> dict:
        return {
            "month": f"{self.year:04d}-{self.month:02d}",
            "employees": {
                "total": self.total_employees,
                "byStatus": dict(self.employees_by_status),
                "byGender": dict(self.employees_by_gender),
                "byContractType": dict(self.employees_by_contract),
            },
            "hours": {
                "worked": round_hours(self.total_worked_hours),
                "theoretical": round_hours(self.total_theoretical_hours),
                "efficiency": round(self.efficiency, 1),
            },
            "topEmployees": [p.to_dict() for p in self.top_employees],
            "pending": {
                "absences": self.pending_absences,
                "overtimes": self.pending_overtimes,
                "specialHours": self.pending_special_hours,
            },
            "trend": [t.to_dict() for t in self.trend],
        }
