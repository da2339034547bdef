from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .rules.base import ValidationRule
from .rules.clock_rules import ClockOrderRule, MissingClockOutRule
from .rules.hours_rules import DailyMaximumRule, HoursConsistencyRule
from .rules.overlap_rule import NoOverlapRule
from .rules.schedule_window_rule import ScheduleWindowRule
from .rules.status_rule import StatusConsistencyRule


@dataclass
class ValidationRuleFactory:
    """Factory Pattern: the ordered rule set applied to every entry.

    Order matters for auto-correction: clamping to the schedule window comes
    before hours are recomputed, and the status is derived last.
    """

    def default_rules(self) -> tuple[ValidationRule, ...]:
        return (
            ClockOrderRule(),
            MissingClockOutRule(),
            ScheduleWindowRule(),
            HoursConsistencyRule(),
            DailyMaximumRule(),
            StatusConsistencyRule(),
            NoOverlapRule(),
        )

    def for_id(self, rule_id: str) -> Optional[ValidationRule]:
        key = (rule_id or "").strip().upper()
        for rule in self.default_rules():
            if rule.rule_id == key:
                return rule
        return None
