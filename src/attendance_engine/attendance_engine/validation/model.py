from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

from ..attendance.model import TimeEntry
from ..core.enums import OverallStatus, Severity
from ..schedules.model import Schedule

_BLOCKING = frozenset({Severity.HIGH, Severity.CRITICAL})


@dataclass(frozen=True)
class RuleResult:
    rule_id: str
    rule_name: str
    is_valid: bool
    severity: Severity
    message: str
    suggestion: Optional[str] = None
    fixable: bool = False

    def to_dict(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "isValid": self.is_valid,
            "severity": self.severity.value,
            "message": self.message,
            "suggestion": self.suggestion,
            "fixable": self.fixable,
        }


@dataclass(frozen=True)
class ValidationContext:
    """What a rule may look at besides the entry itself."""

    schedule: Optional[Schedule]
    same_day_entries: tuple[TimeEntry, ...] = ()
    max_daily_hours: float = 12.0
    tolerance_minutes: int = 15


def overall_status(results: Iterable[RuleResult]) -> OverallStatus:
    failures = [r for r in results if not r.is_valid]
    if not failures:
        return OverallStatus.VALID
    if any(r.severity in _BLOCKING for r in failures):
        return OverallStatus.INVALID
    return OverallStatus.WARNING


@dataclass(frozen=True)
class ValidationReport:
    entry_id: int
    employee_id: int
    work_date: date
    results: tuple[RuleResult, ...]
    overall_status: OverallStatus
    corrections_applied: int = 0
    is_validated: bool = False
    validated_at: Optional[datetime] = None

    @property
    def failures(self) -> tuple[RuleResult, ...]:
        return tuple(r for r in self.results if not r.is_valid)

    @property
    def can_auto_correct(self) -> bool:
        return any(r.fixable for r in self.failures)

    def to_dict(self) -> dict:
        return {
            "timeEntryId": self.entry_id,
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "results": [r.to_dict() for r in self.results],
            "overallStatus": self.overall_status.value,
            "canAutoCorrect": self.can_auto_correct,
            "correctionsApplied": self.corrections_applied,
            "isValidated": self.is_validated,
            "validatedAt": self.validated_at.isoformat() if self.validated_at else None,
        }


@dataclass(frozen=True)
class IssueCount:
    rule_id: str
    rule_name: str
    count: int

    def to_dict(self) -> dict:
        return {"ruleId": self.rule_id, "ruleName": self.rule_name, "count": self.count}


@dataclass(frozen=True)
class ValidationStatistics:
    total_entries: int = 0
    valid_entries: int = 0
    warning_entries: int = 0
    invalid_entries: int = 0
    most_common_issues: tuple[IssueCount, ...] = ()

    def to_dict(self) -> dict:
        return {
            "totalEntries": self.total_entries,
            "validEntries": self.valid_entries,
            "warningEntries": self.warning_entries,
            "invalidEntries": self.invalid_entries,
            "mostCommonIssues": [i.to_dict() for i in self.most_common_issues],
        }


@dataclass(frozen=True)
class PeriodValidation:
    reports: tuple[ValidationReport, ...]
    statistics: ValidationStatistics = field(default_factory=ValidationStatistics)
    corrections_applied: int = 0

    def to_dict(self) -> dict:
        return {
            "reports": [r.to_dict() for r in self.reports],
            "statistics": self.statistics.to_dict(),
            "correctionsApplied": self.corrections_applied,
        }
