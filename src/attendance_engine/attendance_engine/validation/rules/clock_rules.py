from __future__ import annotations

from ...attendance.model import TimeEntry
from ...core.enums import Severity, TimeEntryStatus
from ..model import RuleResult, ValidationContext
from .base import ValidationRule


class ClockOrderRule(ValidationRule):
    rule_id = "CLOCK_ORDER"
    rule_name = "Clock-out after clock-in"
    severity = Severity.CRITICAL
    description = "Clock-out must be strictly later than clock-in."

    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        if entry.clock_in is None or entry.clock_out is None:
            return self.passed()
        if entry.clock_out <= entry.clock_in:
            return self.failed(
                f"Clock-out {entry.clock_out.strftime('%H:%M')} is not after clock-in {entry.clock_in.strftime('%H:%M')}",
                suggestion="Correct the clock times manually",
            )
        return self.passed()


class MissingClockOutRule(ValidationRule):
    rule_id = "MISSING_CLOCK_OUT"
    rule_name = "Missing clock-out"
    severity = Severity.HIGH
    description = "An entry with a clock-in must also have a clock-out."

    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        if entry.clock_in is None or entry.clock_out is not None:
            return self.passed()
        if entry.hours_overridden:
            return self.passed("Hours set by correction")
        if entry.status == TimeEntryStatus.PENDING:
            return self.failed("Entry is still open", suggestion="Clock out before validating")
        return self.failed("Clock-out is missing", suggestion="Add the clock-out time manually")
