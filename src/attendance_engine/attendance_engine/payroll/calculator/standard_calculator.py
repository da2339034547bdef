from __future__ import annotations

from datetime import timedelta
from typing import Optional

from ...attendance.model import TimeEntry
from ...core.enums import PeriodType, TimeEntryStatus
from ...schedules.model import Schedule
from ...schedules.rate_model import resolve_rate
from .base import PayrollCalculator

_STEP = timedelta(minutes=1)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: only COMPLETED entries count, never below 0.

    Weighting walks the clock interval minute by minute through the
    schedule's rate model. BREAK periods are unpaid, minutes outside every
    period are paid at 1.0. Without a schedule (or when hours were set by a
    correction) the weight is 1.0 throughout.
    """

    def worked_hours(self, entry: TimeEntry) -> float:
        if entry.status != TimeEntryStatus.COMPLETED:
            return 0.0
        return max(entry.effective_hours, 0.0)

    def weighted_hours(self, entry: TimeEntry, schedule: Optional[Schedule]) -> float:
        worked = self.worked_hours(entry)
        if worked <= 0 or schedule is None or not schedule.periods:
            return worked
        if entry.hours_overridden or entry.clock_in is None or entry.clock_out is None:
            return worked

        weighted_seconds = 0.0
        cursor = entry.clock_in
        while cursor < entry.clock_out:
            step_end = min(cursor + _STEP, entry.clock_out)
            resolution = resolve_rate(schedule, cursor)
            if resolution is None:
                multiplier = 1.0
            elif resolution.period.period_type == PeriodType.BREAK:
                multiplier = 0.0
            else:
                multiplier = resolution.multiplier
            weighted_seconds += (step_end - cursor).total_seconds() * multiplier
            cursor = step_end
        return weighted_seconds / 3600.0
