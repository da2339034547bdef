from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...attendance.model import TimeEntry
from ...core.enums import Severity
from ..model import RuleResult, ValidationContext


class ValidationRule(ABC):
    """Strategy Pattern: one concern checked against one time entry."""

    rule_id: str = ""
    rule_name: str = ""
    severity: Severity = Severity.LOW
    description: str = ""

    @abstractmethod
    def evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> RuleResult:
        raise NotImplementedError

    def correct(self, entry: TimeEntry, ctx: ValidationContext) -> Optional[TimeEntry]:
        """Corrected copy of ``entry``, or None when this rule cannot fix it."""

        return None

    def passed(self, message: str = "OK") -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            rule_name=self.rule_name,
            is_valid=True,
            severity=self.severity,
            message=message,
        )

    def failed(self, message: str, *, suggestion: Optional[str] = None, fixable: bool = False) -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            rule_name=self.rule_name,
            is_valid=False,
            severity=self.severity,
            message=message,
            suggestion=suggestion,
            fixable=fixable,
        )

    def describe(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "severity": self.severity.value,
            "description": self.description,
            "autoCorrectable": type(self).correct is not ValidationRule.correct,
        }
