from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from ...attendance.model import TimeEntry
from ...common.datetime_utils import hours_between
from ...core.enums import Severity
from ...schedules.model import Schedule
from ..model import RuleResult, ValidationContext
from .base import ValidationRule


def schedule_window(schedule: Schedule, entry: TimeEntry) -> tuple[datetime, datetime]:
    """Nominal [start, end] of ``schedule`` on the entry's work date."""

    tz = entry.clock_in.tzinfo if entry.clock_in else None
    start = datetime.combine(entry.work_date, schedule.start_time, tzinfo=tz)
    s, e = schedule.interval
    return start, start + timedelta(minutes=e - s)


class ScheduleWindowRule(ValidationRule):
    rule_id = "SCHEDULE_WINDOW"
    rule_name = "Within schedule window"
    severity = Severity.LOW
    description = "Clock times should fall inside the assigned schedule, give or take the tolerance."

    def _clamped(self, entry: TimeEntry, ctx: ValidationContext) -> Optional[tuple[datetime, Optional[datetime]]]:
        if ctx.schedule is None or entry.clock_in is None:
            return None

        start, end = schedule_window(ctx.schedule, entry)
        tolerance = timedelta(minutes=ctx.tolerance_minutes)
        early = entry.clock_in < start - tolerance
        late = entry.clock_out is not None and entry.clock_out > end + tolerance
        if not early and not late:
            return None

        new_in = start if early else entry.clock_in
        new_out = end if late else entry.clock_out
        return new_in, new_out

    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        clamped = self._clamped(entry, ctx)
        if clamped is None:
            return self.passed()

        new_in, new_out = clamped
        fixable = new_out is None or new_out > new_in
        window = f"{ctx.schedule.start_time.strftime('%H:%M')}-{ctx.schedule.end_time.strftime('%H:%M')}"
        return self.failed(
            f"Clock times fall outside the schedule window {window}",
            suggestion=f"Clamp the entry to {window}" if fixable else "Check the assigned schedule",
            fixable=fixable,
        )

    def correct(self, entry: TimeEntry, ctx: ValidationContext) -> Optional[TimeEntry]:
        clamped = self._clamped(entry, ctx)
        if clamped is None:
            return None

        new_in, new_out = clamped
        if new_out is not None and new_out <= new_in:
            return None

        hours = entry.total_hours
        if new_out is not None and not entry.hours_overridden:
            hours = round(hours_between(new_in, new_out), 2)
        return replace(entry, clock_in=new_in, clock_out=new_out, total_hours=hours)
