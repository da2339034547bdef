from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import hours_between
from ..common.validators import round_hours
from ..core.enums import TimeEntryStatus


def closing_status(total_hours: float) -> TimeEntryStatus:
    return TimeEntryStatus.COMPLETED if total_hours > 0 else TimeEntryStatus.INCOMPLETE


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one recorded presence of one employee on one day.

    ``total_hours`` is derived from the clock times unless
    ``hours_overridden`` is set, in which case the stored value is the
    authoritative figure entered by a privileged correction.
    """

    entry_id: int
    employee_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    total_hours: float
    status: TimeEntryStatus
    hours_overridden: bool = False
    is_validated: bool = False
    validated_at: Optional[datetime] = None
    validated_by: Optional[int] = None
    note: Optional[str] = None

    @property
    def derived_hours(self) -> Optional[float]:
        """Unrounded (clock_out - clock_in) in hours, when both clocks exist."""

        if self.clock_in is None or self.clock_out is None:
            return None
        return hours_between(self.clock_in, self.clock_out)

    @property
    def effective_hours(self) -> float:
        if self.hours_overridden:
            return float(self.total_hours)
        derived = self.derived_hours
        return derived if derived is not None else float(self.total_hours)

    def to_dict(self) -> dict:
        return {
            "id": self.entry_id,
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "clockIn": self.clock_in.isoformat() if self.clock_in else None,
            "clockOut": self.clock_out.isoformat() if self.clock_out else None,
            "totalHours": round_hours(self.effective_hours),
            "hoursOverridden": self.hours_overridden,
            "status": self.status.value,
            "isValidated": self.is_validated,
            "validatedAt": self.validated_at.isoformat() if self.validated_at else None,
            "validatedBy": self.validated_by,
            "note": self.note,
        }
