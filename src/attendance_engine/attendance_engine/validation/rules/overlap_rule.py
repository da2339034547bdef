from __future__ import annotations

from ...attendance.model import TimeEntry
from ...core.enums import Severity
from ..model import RuleResult, ValidationContext
from .base import ValidationRule


class NoOverlapRule(ValidationRule):
    rule_id = "NO_OVERLAP"
    rule_name = "No overlapping entries"
    severity = Severity.HIGH
    description = "Entries of the same employee on the same day must not overlap in time."

    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        if entry.clock_in is None or entry.clock_out is None:
            return self.passed()

        for other in ctx.same_day_entries:
            if other.clock_in is None or other.clock_out is None:
                continue
            if entry.clock_in < other.clock_out and other.clock_in < entry.clock_out:
                return self.failed(
                    f"Overlaps entry #{other.entry_id} "
                    f"({other.clock_in.strftime('%H:%M')}-{other.clock_out.strftime('%H:%M')})",
                    suggestion="Merge or correct the overlapping entries",
                )
        return self.passed()
