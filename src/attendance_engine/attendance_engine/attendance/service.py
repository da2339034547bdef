from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Union

from ..common.datetime_utils import hours_between, now_utc, parse_iso_date, parse_iso_datetime
from ..common.validators import optional_text, require_non_negative
from ..core.constants import DEFAULT_OPEN_ENTRY_GRACE_HOURS
from ..core.enums import TimeEntryStatus, normalize_enum
from ..core.exceptions import (
    DuplicateEntryError,
    InvalidRangeError,
    NoOpenEntryError,
    NotFoundError,
)
from ..core.policy import AccessPolicy, Actor, Capability, RoleAccessPolicy, require
from ..employees.repository import EmployeeRepository
from .model import TimeEntry, closing_status
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Timestamp = Union[datetime, str]


def _as_datetime(value: Optional[Timestamp]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return parse_iso_datetime(value)


def _as_date(value: Union[date, str]) -> date:
    return value if isinstance(value, date) else parse_iso_date(value)


class AttendanceService:
    """TimeEntry lifecycle: clock-in, clock-out, corrections, absent markers."""

    def __init__(
        self,
        entries: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        open_entry_grace_hours: int = DEFAULT_OPEN_ENTRY_GRACE_HOURS,
    ):
        self._entries = entries
        self._employees = employees
        self._policy = policy or RoleAccessPolicy()
        self._grace_hours = int(open_entry_grace_hours)

    def _require_employee(self, employee_id: int) -> None:
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")

    def get_entry(self, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        return entry

    def clock_in(self, actor: Actor, employee_id: int, *, at: Optional[Timestamp] = None) -> TimeEntry:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.RECORD)
        self._require_employee(employee_id)

        now = _as_datetime(at) or now_utc()
        work_date = now.date()

        open_today = [
            e
            for e in self._entries.find_for_employee_and_date(int(employee_id), work_date)
            if e.status == TimeEntryStatus.PENDING
        ]
        if open_today:
            raise DuplicateEntryError("An open time entry already exists for this day")

        entry_id = self._entries.create_entry(
            employee_id=int(employee_id),
            work_date=work_date,
            clock_in=now,
            status=TimeEntryStatus.PENDING,
        )
        logger.info("clock-in employee=%s entry=%s at=%s", employee_id, entry_id, now.isoformat())
        return self.get_entry(entry_id)

    def clock_out(self, actor: Actor, employee_id: int, *, at: Optional[Timestamp] = None) -> TimeEntry:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.RECORD)

        entry = self._entries.find_open_entry(int(employee_id))
        if not entry or entry.clock_in is None:
            raise NoOpenEntryError("No open time entry to clock out from")

        now = _as_datetime(at) or now_utc()
        total_hours = round(hours_between(entry.clock_in, now), 2)
        status = closing_status(total_hours)

        if not self._entries.close_entry(entry_id=entry.entry_id, clock_out=now, total_hours=total_hours, status=status):
            # Someone else closed it between read and write.
            raise NoOpenEntryError("No open time entry to clock out from")

        logger.info("clock-out employee=%s entry=%s hours=%.2f status=%s", employee_id, entry.entry_id, total_hours, status.value)
        return self.get_entry(entry.entry_id)

    def mark_absent(self, actor: Actor, employee_id: int, *, work_date: Union[date, str], note: Optional[str] = None) -> TimeEntry:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.CORRECT)
        self._require_employee(employee_id)

        day = _as_date(work_date)
        if self._entries.find_for_employee_and_date(int(employee_id), day):
            raise DuplicateEntryError("A time entry already exists for this day")

        entry_id = self._entries.create_entry(
            employee_id=int(employee_id),
            work_date=day,
            clock_in=None,
            status=TimeEntryStatus.ABSENT,
            note=optional_text(note),
        )
        return self.get_entry(entry_id)

    def correct_entry(
        self,
        actor: Actor,
        entry_id: int,
        *,
        clock_in: Optional[Timestamp] = None,
        clock_out: Optional[Timestamp] = None,
        total_hours: Optional[float] = None,
        status: Optional[Union[TimeEntryStatus, str]] = None,
        note: Optional[str] = None,
    ) -> TimeEntry:
        """Privileged manual correction.

        Clock times, when supplied, win: hours are re-derived from them and the
        override flag is cleared. A bare ``total_hours`` is stored as an
        authoritative override. Any correction drops the validation mark.
        """

        entry = self.get_entry(entry_id)
        require(self._policy, actor, employee_id=entry.employee_id, capability=Capability.CORRECT)

        new_in = _as_datetime(clock_in) or entry.clock_in
        new_out = _as_datetime(clock_out) or entry.clock_out
        clocks_given = clock_in not in (None, "") or clock_out not in (None, "")

        hours = entry.total_hours
        overridden = entry.hours_overridden
        if clocks_given:
            if new_in is not None and new_out is not None:
                if new_out <= new_in:
                    raise InvalidRangeError("Clock-out must be after clock-in")
                hours = round(hours_between(new_in, new_out), 2)
            overridden = False
        elif total_hours is not None:
            hours = require_non_negative(total_hours, "totalHours")
            overridden = True

        if status is not None:
            new_status = normalize_enum(TimeEntryStatus, status)
        elif (clocks_given and new_out is not None) or (total_hours is not None and not clocks_given):
            new_status = closing_status(hours)
        else:
            new_status = entry.status

        corrected = replace(
            entry,
            clock_in=new_in,
            clock_out=new_out,
            total_hours=hours,
            hours_overridden=overridden,
            status=new_status,
            note=optional_text(note) if note is not None else entry.note,
            is_validated=False,
            validated_at=None,
            validated_by=None,
        )
        if not self._entries.update_entry(corrected):
            raise NotFoundError("Time entry not found")

        logger.info("entry %s corrected by user %s (override=%s)", entry.entry_id, actor.user_id, overridden)
        return corrected

    def close_stale_entries(
        self, actor: Actor, *, as_of: Timestamp, grace_hours: Optional[int] = None
    ) -> list[TimeEntry]:
        """PENDING entries older than the grace window become INCOMPLETE.

        Organisation-wide sweep, so the actor needs the correction right for
        every employee (a scheduled job runs it as an administrator).
        """

        require(self._policy, actor, employee_id=None, capability=Capability.CORRECT)
        now = parse_iso_datetime(as_of)
        cutoff = now - timedelta(hours=self._grace_hours if grace_hours is None else int(grace_hours))

        closed: list[TimeEntry] = []
        for entry in self._entries.find_by_status(TimeEntryStatus.PENDING, clock_in_before=cutoff):
            if entry.clock_in is None or entry.clock_in > cutoff:
                continue
            if self._entries.close_entry(
                entry_id=entry.entry_id,
                clock_out=None,
                total_hours=0.0,
                status=TimeEntryStatus.INCOMPLETE,
            ):
                closed.append(replace(entry, status=TimeEntryStatus.INCOMPLETE, total_hours=0.0))

        if closed:
            logger.info("closed %s stale open entries (cutoff=%s)", len(closed), cutoff.isoformat())
        return closed

    def list_entries(
        self,
        actor: Actor,
        employee_id: int,
        *,
        start: Union[date, str],
        end: Union[date, str],
    ) -> list[TimeEntry]:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REPORT)

        rows = self._entries.find_by_date_range(
            start_date=_as_date(start),
            end_date=_as_date(end),
            employee_id=int(employee_id),
        )
        return sorted(rows, key=lambda e: (e.work_date, e.entry_id))
