from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TimeEntryStatus
from .model import TimeEntry


class AttendanceRepository(Protocol):
    def create_entry(
        self,
        *,
        employee_id: int,
        work_date: date,
        clock_in: Optional[datetime],
        status: TimeEntryStatus,
        note: Optional[str] = None,
    ) -> int:
        """Insert a new entry.

        Must raise DuplicateEntryError when a PENDING entry already exists for
        (employee_id, work_date) (unique key enforced by the store).
        """

        raise NotImplementedError

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def find_open_entry(self, employee_id: int) -> Optional[TimeEntry]:
        """Latest PENDING entry of the employee, if any."""

        raise NotImplementedError

    def find_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def find_by_date_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def find_by_status(self, status: TimeEntryStatus, *, clock_in_before: Optional[datetime] = None) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def close_entry(
        self,
        *,
        entry_id: int,
        clock_out: Optional[datetime],
        total_hours: float,
        status: TimeEntryStatus,
    ) -> bool:
        """Compare-and-swap close: only applies while the entry is still PENDING."""

        raise NotImplementedError

    def update_entry(self, entry: TimeEntry) -> bool:
        """Persist every mutable field of ``entry`` (corrections, validation)."""

        raise NotImplementedError
