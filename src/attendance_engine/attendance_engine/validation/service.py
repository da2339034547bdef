from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Union

from ..attendance.model import TimeEntry
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc, parse_iso_date
from ..core.constants import (
    DEFAULT_MAX_DAILY_HOURS,
    DEFAULT_SCHEDULE_TOLERANCE_MINUTES,
    MOST_COMMON_ISSUES_LIMIT,
)
from ..core.enums import OverallStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policy import AccessPolicy, Actor, Capability, RoleAccessPolicy, require
from ..employees.repository import EmployeeRepository
from ..schedules.assignments import schedule_for_employee
from ..schedules.repository import ScheduleRepository
from .factory import ValidationRuleFactory
from .model import (
    IssueCount,
    PeriodValidation,
    RuleResult,
    ValidationContext,
    ValidationReport,
    ValidationStatistics,
    overall_status,
)
from .rules.base import ValidationRule

logger = logging.getLogger(__name__)


def _as_date(value: Union[date, str]) -> date:
    return value if isinstance(value, date) else parse_iso_date(value)


def summarize(reports: Sequence[ValidationReport], *, limit: int = MOST_COMMON_ISSUES_LIMIT) -> ValidationStatistics:
    by_status = Counter(r.overall_status for r in reports)
    issues: Counter = Counter()
    names: dict[str, str] = {}
    for report in reports:
        for failure in report.failures:
            issues[failure.rule_id] += 1
            names[failure.rule_id] = failure.rule_name

    ranked = sorted(issues.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]
    return ValidationStatistics(
        total_entries=len(reports),
        valid_entries=by_status[OverallStatus.VALID],
        warning_entries=by_status[OverallStatus.WARNING],
        invalid_entries=by_status[OverallStatus.INVALID],
        most_common_issues=tuple(IssueCount(rule_id=k, rule_name=names[k], count=v) for k, v in ranked),
    )


class ValidationService:
    """Rule engine over time entries: evaluate, auto-correct, mark validated.

    Validation is the only path that sets ``is_validated``. An entry is
    marked iff its final evaluation is VALID; an entry already marked is
    re-evaluated read-only and nothing is written.
    """

    def __init__(
        self,
        entries: AttendanceRepository,
        employees: EmployeeRepository,
        schedules: ScheduleRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        rules: Optional[Sequence[ValidationRule]] = None,
        max_daily_hours: float = DEFAULT_MAX_DAILY_HOURS,
        tolerance_minutes: int = DEFAULT_SCHEDULE_TOLERANCE_MINUTES,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._entries = entries
        self._employees = employees
        self._schedules = schedules
        self._policy = policy or RoleAccessPolicy()
        self._rules = tuple(rules) if rules is not None else ValidationRuleFactory().default_rules()
        self._max_daily_hours = float(max_daily_hours)
        self._tolerance_minutes = int(tolerance_minutes)
        self._clock = clock

    def _context(self, entry: TimeEntry) -> ValidationContext:
        same_day = tuple(
            e
            for e in self._entries.find_for_employee_and_date(entry.employee_id, entry.work_date)
            if e.entry_id != entry.entry_id
        )
        return ValidationContext(
            schedule=schedule_for_employee(self._employees, self._schedules, entry.employee_id),
            same_day_entries=same_day,
            max_daily_hours=self._max_daily_hours,
            tolerance_minutes=self._tolerance_minutes,
        )

    def _evaluate(self, entry: TimeEntry, ctx: ValidationContext) -> tuple[RuleResult, ...]:
        return tuple(rule.evaluate(entry, ctx) for rule in self._rules)

    def _auto_correct(self, entry: TimeEntry, ctx: ValidationContext) -> tuple[TimeEntry, int]:
        applied = 0
        for rule in self._rules:
            result = rule.evaluate(entry, ctx)
            if result.is_valid or not result.fixable:
                continue
            corrected = rule.correct(entry, ctx)
            if corrected is not None and corrected != entry:
                entry = corrected
                applied += 1
        return entry, applied

    def _report(self, entry: TimeEntry, results: tuple[RuleResult, ...], corrections: int) -> ValidationReport:
        return ValidationReport(
            entry_id=entry.entry_id,
            employee_id=entry.employee_id,
            work_date=entry.work_date,
            results=results,
            overall_status=overall_status(results),
            corrections_applied=corrections,
            is_validated=entry.is_validated,
            validated_at=entry.validated_at,
        )

    def _run(self, actor: Actor, entry: TimeEntry, *, auto_correct: bool, persist: bool = True) -> ValidationReport:
        ctx = self._context(entry)
        results = self._evaluate(entry, ctx)
        if entry.is_validated or not persist:
            return self._report(entry, results, 0)

        corrections = 0
        if auto_correct:
            entry, corrections = self._auto_correct(entry, ctx)
            if corrections:
                results = self._evaluate(entry, ctx)

        status = overall_status(results)
        if status == OverallStatus.VALID:
            entry = replace(entry, is_validated=True, validated_at=self._clock(), validated_by=actor.user_id)

        if corrections or status == OverallStatus.VALID:
            if not self._entries.update_entry(entry):
                raise NotFoundError("Time entry not found")
            logger.info(
                "entry %s validated=%s corrections=%s status=%s",
                entry.entry_id,
                entry.is_validated,
                corrections,
                status.value,
            )
        return self._report(entry, results, corrections)

    def validate(self, actor: Actor, entry_id: int, *, auto_correct: bool = False) -> ValidationReport:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        require(self._policy, actor, employee_id=entry.employee_id, capability=Capability.VALIDATE)
        return self._run(actor, entry, auto_correct=auto_correct)

    def _entries_between(self, employee_id: int, start: Union[date, str], end: Union[date, str]) -> list[TimeEntry]:
        start_d, end_d = _as_date(start), _as_date(end)
        if end_d < start_d:
            raise ValidationError("End date must be >= start date")
        rows = self._entries.find_by_date_range(start_date=start_d, end_date=end_d, employee_id=int(employee_id))
        return sorted(rows, key=lambda e: (e.work_date, e.entry_id))

    def validate_period(
        self,
        actor: Actor,
        employee_id: int,
        *,
        start: Union[date, str],
        end: Union[date, str],
        auto_correct: bool = False,
    ) -> PeriodValidation:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.VALIDATE)

        reports = tuple(
            self._run(actor, entry, auto_correct=auto_correct)
            for entry in self._entries_between(employee_id, start, end)
        )
        corrections = sum(r.corrections_applied for r in reports)
        logger.info(
            "validated %s entries of employee %s (%s..%s), %s corrections",
            len(reports),
            employee_id,
            start,
            end,
            corrections,
        )
        return PeriodValidation(reports=reports, statistics=summarize(reports), corrections_applied=corrections)

    def validation_statistics(
        self,
        actor: Actor,
        employee_id: int,
        *,
        start: Union[date, str],
        end: Union[date, str],
    ) -> ValidationStatistics:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REPORT)

        reports = [
            self._run(actor, entry, auto_correct=False, persist=False)
            for entry in self._entries_between(employee_id, start, end)
        ]
        return summarize(reports)

    def list_rules(self) -> list[dict]:
        return [rule.describe() for rule in self._rules]
