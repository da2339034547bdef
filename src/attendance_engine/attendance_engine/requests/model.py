from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.validators import round_hours
from ..core.enums import AbsenceType, ApprovalStatus, RangeType, SpecialHourType


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Absence:
    """Leave request over an inclusive date range.

    ``days`` is derived from the range unless ``days_overridden`` is set
    (half days), in which case it is the requested figure.
    """

    absence_id: int
    employee_id: int
    absence_type: AbsenceType
    start_date: date
    end_date: date
    days: float
    status: ApprovalStatus
    days_overridden: bool = False
    reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.absence_id,
            "employeeId": self.employee_id,
            "type": self.absence_type.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "days": self.days,
            "daysOverridden": self.days_overridden,
            "reason": self.reason,
            "status": self.status.value,
            "approvedBy": self.approved_by,
            "approvedAt": _ts(self.approved_at),
        }


@dataclass(frozen=True)
class Overtime:
    overtime_id: int
    employee_id: int
    work_date: date
    hours: float
    multiplier: float
    status: ApprovalStatus
    range_type: RangeType = RangeType.OVERTIME
    reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    @property
    def weighted_hours(self) -> float:
        return self.hours * self.multiplier

    def to_dict(self) -> dict:
        return {
            "id": self.overtime_id,
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "hours": round_hours(self.hours),
            "rangeType": self.range_type.value,
            "multiplier": self.multiplier,
            "reason": self.reason,
            "status": self.status.value,
            "approvedBy": self.approved_by,
            "approvedAt": _ts(self.approved_at),
        }


@dataclass(frozen=True)
class SpecialHours:
    special_id: int
    employee_id: int
    work_date: date
    hours: float
    hour_type: SpecialHourType
    multiplier: float
    status: ApprovalStatus
    reason: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    @property
    def weighted_hours(self) -> float:
        return self.hours * self.multiplier

    def to_dict(self) -> dict:
        return {
            "id": self.special_id,
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "hours": round_hours(self.hours),
            "type": self.hour_type.value,
            "multiplier": self.multiplier,
            "reason": self.reason,
            "status": self.status.value,
            "approvedBy": self.approved_by,
            "approvedAt": _ts(self.approved_at),
        }
