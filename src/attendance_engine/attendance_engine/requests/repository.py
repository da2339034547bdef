from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AbsenceType, ApprovalStatus, RangeType, SpecialHourType
from .model import Absence, Overtime, SpecialHours


class RequestRepository(Protocol):
    # Absences
    def create_absence(
        self,
        *,
        employee_id: int,
        absence_type: AbsenceType,
        start_date: date,
        end_date: date,
        days: float,
        days_overridden: bool,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_absence(self, absence_id: int) -> Optional[Absence]:
        raise NotImplementedError

    def update_absence(self, absence: Absence) -> bool:
        """Rewrite a request; only applies while it is still PENDING."""

        raise NotImplementedError

    def decide_absence(
        self,
        *,
        absence_id: int,
        status: ApprovalStatus,
        decided_by: int,
        decided_at: datetime,
    ) -> bool:
        """Compare-and-swap PENDING -> ``status``; False when nothing changed."""

        raise NotImplementedError

    def find_absences(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Absence]:
        """Absences overlapping [start_date, end_date] when a window is given."""

        raise NotImplementedError

    # Overtime
    def create_overtime(
        self,
        *,
        employee_id: int,
        work_date: date,
        hours: float,
        range_type: RangeType,
        multiplier: float,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_overtime(self, overtime_id: int) -> Optional[Overtime]:
        raise NotImplementedError

    def decide_overtime(
        self,
        *,
        overtime_id: int,
        status: ApprovalStatus,
        decided_by: int,
        decided_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def find_overtimes(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Overtime]:
        raise NotImplementedError

    # Special hours
    def create_special_hours(
        self,
        *,
        employee_id: int,
        work_date: date,
        hours: float,
        hour_type: SpecialHourType,
        multiplier: float,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_special_hours(self, special_id: int) -> Optional[SpecialHours]:
        raise NotImplementedError

    def decide_special_hours(
        self,
        *,
        special_id: int,
        status: ApprovalStatus,
        decided_by: int,
        decided_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def find_special_hours(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[SpecialHours]:
        raise NotImplementedError
