from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ...attendance.model import TimeEntry, closing_status
from ...core.enums import Severity, TimeEntryStatus
from ..model import RuleResult, ValidationContext
from .base import ValidationRule


def expected_status(entry: TimeEntry) -> TimeEntryStatus:
    """Status implied by the clock data of ``entry``."""

    if entry.hours_overridden:
        return closing_status(entry.effective_hours)
    if entry.clock_in is None and entry.clock_out is None:
        return TimeEntryStatus.ABSENT if entry.status == TimeEntryStatus.ABSENT else TimeEntryStatus.INCOMPLETE
    if entry.clock_out is None:
        return TimeEntryStatus.PENDING if entry.status == TimeEntryStatus.PENDING else TimeEntryStatus.INCOMPLETE
    return closing_status(entry.effective_hours)


class StatusConsistencyRule(ValidationRule):
    rule_id = "STATUS_CONSISTENCY"
    rule_name = "Status matches clock data"
    severity = Severity.MEDIUM
    description = "COMPLETED needs positive hours; entries without a clock-out cannot be COMPLETED."

    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        expected = expected_status(entry)
        if entry.status == expected:
            return self.passed()
        return self.failed(
            f"Status {entry.status.value} does not match the recorded times",
            suggestion=f"Set status to {expected.value}",
            fixable=True,
        )

    def correct(self, entry: TimeEntry, ctx: ValidationContext) -> Optional[TimeEntry]:
        expected = expected_status(entry)
        if entry.status == expected:
            return None
        return replace(entry, status=expected)
