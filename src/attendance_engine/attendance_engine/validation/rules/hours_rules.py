from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ...attendance.model import TimeEntry
from ...core.constants import HOURS_TOLERANCE
from ...core.enums import Severity, TimeEntryStatus
from ..model import RuleResult, ValidationContext
from .base import ValidationRule


class HoursConsistencyRule(ValidationRule):
    rule_id = "HOURS_CONSISTENCY"
    rule_name = "Hours match clock times"
    severity = Severity.MEDIUM
    description = "Stored total hours must equal clock-out minus clock-in, unless set by a correction."

    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        derived = entry.derived_hours
        if derived is None:
            return self.passed()
        if entry.hours_overridden:
            return self.passed("Hours set by correction")
        if abs(round(derived, 2) - float(entry.total_hours)) <= HOURS_TOLERANCE:
            return self.passed()
        return self.failed(
            f"Total hours {float(entry.total_hours):.2f} differ from clock times ({derived:.2f})",
            suggestion="Recompute total hours from the clock times",
            fixable=derived > 0,
        )

    def correct(self, entry: TimeEntry, ctx: ValidationContext) -> Optional[TimeEntry]:
        derived = entry.derived_hours
        if derived is None or derived <= 0 or entry.hours_overridden:
            return None
        return replace(entry, total_hours=round(derived, 2))


def _worked(entry: TimeEntry) -> float:
    if entry.status == TimeEntryStatus.ABSENT:
        return 0.0
    return max(entry.effective_hours, 0.0)


class DailyMaximumRule(ValidationRule):
    rule_id = "DAILY_MAXIMUM"
    rule_name = "Daily maximum"
    severity = Severity.HIGH
    description = "Hours recorded for one employee on one day must not exceed the daily maximum."

    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        total = _worked(entry) + sum(_worked(e) for e in ctx.same_day_entries)
        if total > ctx.max_daily_hours + HOURS_TOLERANCE:
            return self.failed(
                f"{total:.2f}h recorded for the day, maximum is {ctx.max_daily_hours:g}h",
                suggestion="Split the extra time into an overtime declaration",
            )
        return self.passed()
