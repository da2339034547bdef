from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from ..common.datetime_utils import inclusive_days, now_utc, parse_iso_date, to_utc_date
from ..common.validators import optional_positive, optional_text, require_positive
from ..core.constants import DEFAULT_RANGE_MULTIPLIERS, DEFAULT_SPECIAL_HOUR_MULTIPLIERS
from ..core.enums import AbsenceType, ApprovalStatus, RangeType, SpecialHourType, normalize_enum
from ..core.exceptions import AlreadyDecidedError, ImmutableStateError, NotFoundError, ValidationError
from ..core.policy import AccessPolicy, Actor, Capability, RoleAccessPolicy, require
from ..employees.repository import EmployeeRepository
from .model import Absence, Overtime, SpecialHours
from .repository import RequestRepository

logger = logging.getLogger(__name__)

DateInput = Union[date, datetime, str]

_DECISIONS = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})


def _decision(status: Union[ApprovalStatus, str]) -> ApprovalStatus:
    decided = normalize_enum(ApprovalStatus, status)
    if decided not in _DECISIONS:
        raise ValidationError("Decision must be APPROVED or REJECTED")
    return decided


def _optional_date(value: Optional[Union[date, str]]) -> Optional[date]:
    if value is None or value == "":
        return None
    return value if isinstance(value, date) else parse_iso_date(value)


def _absence_days(start: DateInput, end: DateInput, override: Any) -> tuple[float, bool]:
    derived = inclusive_days(start, end)
    if derived <= 0:
        raise ValidationError("End date must be >= start date")

    requested = optional_positive(override, "days")
    if requested is None:
        return float(derived), False
    if requested > derived:
        raise ValidationError(f"days cannot exceed the {derived} days of the range")
    return requested, True


class RequestService:
    """Absence, overtime and special-hours records and their approval flow.

    Approvals are single-step PENDING -> APPROVED|REJECTED transitions,
    written as compare-and-swap so a concurrent decision surfaces as
    AlreadyDecidedError instead of silently overwriting.
    """

    def __init__(
        self,
        requests: RequestRepository,
        employees: EmployeeRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._requests = requests
        self._employees = employees
        self._policy = policy or RoleAccessPolicy()
        self._clock = clock

    def _require_employee(self, employee_id: int) -> None:
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")

    # Absences
    def get_absence(self, absence_id: int) -> Absence:
        absence = self._requests.get_absence(int(absence_id))
        if not absence:
            raise NotFoundError("Absence not found")
        return absence

    def request_absence(
        self,
        actor: Actor,
        employee_id: int,
        *,
        absence_type: Union[AbsenceType, str],
        start_date: DateInput,
        end_date: DateInput,
        reason: Optional[str] = None,
        days: Any = None,
    ) -> Absence:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REQUEST)
        self._require_employee(employee_id)

        kind = normalize_enum(AbsenceType, absence_type)
        day_count, overridden = _absence_days(start_date, end_date, days)

        absence_id = self._requests.create_absence(
            employee_id=int(employee_id),
            absence_type=kind,
            start_date=to_utc_date(start_date),
            end_date=to_utc_date(end_date),
            days=day_count,
            days_overridden=overridden,
            reason=optional_text(reason),
        )
        logger.info("absence %s requested by employee %s (%s, %s days)", absence_id, employee_id, kind.value, day_count)
        return self.get_absence(absence_id)

    def update_absence(
        self,
        actor: Actor,
        absence_id: int,
        *,
        absence_type: Optional[Union[AbsenceType, str]] = None,
        start_date: Optional[DateInput] = None,
        end_date: Optional[DateInput] = None,
        reason: Optional[str] = None,
        days: Any = None,
    ) -> Absence:
        current = self.get_absence(absence_id)
        require(self._policy, actor, employee_id=current.employee_id, capability=Capability.REQUEST)
        if current.status != ApprovalStatus.PENDING:
            raise ImmutableStateError("Only pending absences can be edited")

        new_start = to_utc_date(start_date) if start_date not in (None, "") else current.start_date
        new_end = to_utc_date(end_date) if end_date not in (None, "") else current.end_date
        range_changed = (new_start, new_end) != (current.start_date, current.end_date)

        if range_changed or days not in (None, ""):
            day_count, overridden = _absence_days(new_start, new_end, days)
        else:
            day_count, overridden = current.days, current.days_overridden

        updated = Absence(
            absence_id=current.absence_id,
            employee_id=current.employee_id,
            absence_type=normalize_enum(AbsenceType, absence_type) if absence_type else current.absence_type,
            start_date=new_start,
            end_date=new_end,
            days=day_count,
            days_overridden=overridden,
            reason=optional_text(reason) if reason is not None else current.reason,
            status=current.status,
        )
        if not self._requests.update_absence(updated):
            raise ImmutableStateError("Only pending absences can be edited")
        return updated

    def decide_absence(self, actor: Actor, absence_id: int, status: Union[ApprovalStatus, str]) -> Absence:
        decided = _decision(status)
        current = self.get_absence(absence_id)
        require(self._policy, actor, employee_id=current.employee_id, capability=Capability.APPROVE)
        if current.status != ApprovalStatus.PENDING:
            raise AlreadyDecidedError(f"Absence already {current.status.value}")

        ok = self._requests.decide_absence(
            absence_id=current.absence_id,
            status=decided,
            decided_by=actor.user_id,
            decided_at=self._clock(),
        )
        if not ok:
            raise AlreadyDecidedError("Absence was decided concurrently")

        logger.info("absence %s %s by user %s", current.absence_id, decided.value, actor.user_id)
        return self.get_absence(current.absence_id)

    def approve_absence(self, actor: Actor, absence_id: int) -> Absence:
        return self.decide_absence(actor, absence_id, ApprovalStatus.APPROVED)

    def reject_absence(self, actor: Actor, absence_id: int) -> Absence:
        return self.decide_absence(actor, absence_id, ApprovalStatus.REJECTED)

    # Overtime
    def get_overtime(self, overtime_id: int) -> Overtime:
        overtime = self._requests.get_overtime(int(overtime_id))
        if not overtime:
            raise NotFoundError("Overtime not found")
        return overtime

    def declare_overtime(
        self,
        actor: Actor,
        employee_id: int,
        *,
        work_date: Union[date, str],
        hours: Any,
        range_type: Optional[Union[RangeType, str]] = None,
        multiplier: Any = None,
        reason: Optional[str] = None,
    ) -> Overtime:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REQUEST)
        self._require_employee(employee_id)

        kind = normalize_enum(RangeType, range_type) if range_type else RangeType.OVERTIME
        rate = optional_positive(multiplier, "multiplier")
        overtime_id = self._requests.create_overtime(
            employee_id=int(employee_id),
            work_date=to_utc_date(work_date),
            hours=require_positive(hours, "hours"),
            range_type=kind,
            multiplier=rate if rate is not None else DEFAULT_RANGE_MULTIPLIERS[kind],
            reason=optional_text(reason),
        )
        return self.get_overtime(overtime_id)

    def decide_overtime(self, actor: Actor, overtime_id: int, status: Union[ApprovalStatus, str]) -> Overtime:
        decided = _decision(status)
        current = self.get_overtime(overtime_id)
        require(self._policy, actor, employee_id=current.employee_id, capability=Capability.APPROVE)
        if current.status != ApprovalStatus.PENDING:
            raise AlreadyDecidedError(f"Overtime already {current.status.value}")

        ok = self._requests.decide_overtime(
            overtime_id=current.overtime_id,
            status=decided,
            decided_by=actor.user_id,
            decided_at=self._clock(),
        )
        if not ok:
            raise AlreadyDecidedError("Overtime was decided concurrently")

        logger.info("overtime %s %s by user %s", current.overtime_id, decided.value, actor.user_id)
        return self.get_overtime(current.overtime_id)

    def approve_overtime(self, actor: Actor, overtime_id: int) -> Overtime:
        return self.decide_overtime(actor, overtime_id, ApprovalStatus.APPROVED)

    def reject_overtime(self, actor: Actor, overtime_id: int) -> Overtime:
        return self.decide_overtime(actor, overtime_id, ApprovalStatus.REJECTED)

    # Special hours
    def get_special_hours(self, special_id: int) -> SpecialHours:
        special = self._requests.get_special_hours(int(special_id))
        if not special:
            raise NotFoundError("Special hours not found")
        return special

    def declare_special_hours(
        self,
        actor: Actor,
        employee_id: int,
        *,
        work_date: Union[date, str],
        hours: Any,
        hour_type: Union[SpecialHourType, str],
        multiplier: Any = None,
        reason: Optional[str] = None,
    ) -> SpecialHours:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REQUEST)
        self._require_employee(employee_id)

        kind = normalize_enum(SpecialHourType, hour_type)
        rate = optional_positive(multiplier, "multiplier")
        special_id = self._requests.create_special_hours(
            employee_id=int(employee_id),
            work_date=to_utc_date(work_date),
            hours=require_positive(hours, "hours"),
            hour_type=kind,
            multiplier=rate if rate is not None else DEFAULT_SPECIAL_HOUR_MULTIPLIERS[kind],
            reason=optional_text(reason),
        )
        return self.get_special_hours(special_id)

    def decide_special_hours(self, actor: Actor, special_id: int, status: Union[ApprovalStatus, str]) -> SpecialHours:
        decided = _decision(status)
        current = self.get_special_hours(special_id)
        require(self._policy, actor, employee_id=current.employee_id, capability=Capability.APPROVE)
        if current.status != ApprovalStatus.PENDING:
            raise AlreadyDecidedError(f"Special hours already {current.status.value}")

        ok = self._requests.decide_special_hours(
            special_id=current.special_id,
            status=decided,
            decided_by=actor.user_id,
            decided_at=self._clock(),
        )
        if not ok:
            raise AlreadyDecidedError("Special hours were decided concurrently")

        logger.info("special hours %s %s by user %s", current.special_id, decided.value, actor.user_id)
        return self.get_special_hours(current.special_id)

    def approve_special_hours(self, actor: Actor, special_id: int) -> SpecialHours:
        return self.decide_special_hours(actor, special_id, ApprovalStatus.APPROVED)

    def reject_special_hours(self, actor: Actor, special_id: int) -> SpecialHours:
        return self.decide_special_hours(actor, special_id, ApprovalStatus.REJECTED)

    # Listings
    def list_for_employee(
        self,
        actor: Actor,
        employee_id: int,
        *,
        status: Optional[Union[ApprovalStatus, str]] = None,
        start: Optional[Union[date, str]] = None,
        end: Optional[Union[date, str]] = None,
    ) -> dict:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.REPORT)

        filters = dict(
            employee_id=int(employee_id),
            status=normalize_enum(ApprovalStatus, status) if status else None,
            start_date=_optional_date(start),
            end_date=_optional_date(end),
        )
        return {
            "absences": list(self._requests.find_absences(**filters)),
            "overtimes": list(self._requests.find_overtimes(**filters)),
            "special_hours": list(self._requests.find_special_hours(**filters)),
        }

    def list_pending(self, actor: Actor) -> dict:
        require(self._policy, actor, employee_id=None, capability=Capability.APPROVE)

        return {
            "absences": list(self._requests.find_absences(status=ApprovalStatus.PENDING)),
            "overtimes": list(self._requests.find_overtimes(status=ApprovalStatus.PENDING)),
            "special_hours": list(self._requests.find_special_hours(status=ApprovalStatus.PENDING)),
        }
