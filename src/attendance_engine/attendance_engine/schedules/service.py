from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time
from typing import Any, Mapping, Optional, Union

from ..common.datetime_utils import parse_clock_time, parse_iso_datetime
from ..core.exceptions import ConfigurationError, NotFoundError
from ..core.policy import AccessPolicy, Actor, Capability, RoleAccessPolicy, require
from ..employees.repository import EmployeeRepository
from .assignments import cycle_for, schedule_for_employee
from .model import RateResolution, Schedule, WorkCycle
from .rate_model import build_schedule, build_work_cycle, resolve_rate
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """Use cases around the rate model: schedules, work cycles, assignments."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        employees: EmployeeRepository,
        *,
        policy: Optional[AccessPolicy] = None,
    ):
        self._schedules = schedules
        self._employees = employees
        self._policy = policy or RoleAccessPolicy()

    def create_schedule(self, actor: Actor, payload: Mapping[str, Any]) -> Schedule:
        require(self._policy, actor, employee_id=None, capability=Capability.CONFIGURE)

        schedule = build_schedule(payload)
        schedule_id = self._schedules.create_schedule(schedule)
        logger.info("schedule %s created (%s periods)", schedule_id, len(schedule.periods))
        return replace(schedule, schedule_id=schedule_id)

    def update_schedule(self, actor: Actor, schedule_id: int, payload: Mapping[str, Any]) -> Schedule:
        require(self._policy, actor, employee_id=None, capability=Capability.CONFIGURE)

        self.get_schedule(schedule_id)
        schedule = build_schedule(payload, schedule_id=int(schedule_id))
        if not self._schedules.update_schedule(schedule):
            raise NotFoundError("Schedule not found")
        logger.info("schedule %s updated", schedule_id)
        return schedule

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = self._schedules.get_schedule(int(schedule_id))
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def list_schedules(self) -> list[Schedule]:
        return list(self._schedules.list_schedules())

    def delete_schedule(self, actor: Actor, schedule_id: int) -> None:
        require(self._policy, actor, employee_id=None, capability=Capability.CONFIGURE)

        if self._schedules.count_cycles_for_schedule(int(schedule_id)) > 0:
            raise ConfigurationError("Schedule is still referenced by a work cycle")
        if not self._schedules.delete_schedule(int(schedule_id)):
            raise NotFoundError("Schedule not found")

    def create_work_cycle(self, actor: Actor, payload: Mapping[str, Any]) -> WorkCycle:
        require(self._policy, actor, employee_id=None, capability=Capability.CONFIGURE)

        cycle = build_work_cycle(payload)
        self.get_schedule(cycle.schedule_id)
        cycle_id = self._schedules.create_work_cycle(cycle)
        return replace(cycle, cycle_id=cycle_id)

    def update_work_cycle(self, actor: Actor, cycle_id: int, payload: Mapping[str, Any]) -> WorkCycle:
        require(self._policy, actor, employee_id=None, capability=Capability.CONFIGURE)

        self.get_work_cycle(cycle_id)
        cycle = build_work_cycle(payload, cycle_id=int(cycle_id))
        self.get_schedule(cycle.schedule_id)
        if not self._schedules.update_work_cycle(cycle):
            raise NotFoundError("Work cycle not found")
        return cycle

    def get_work_cycle(self, cycle_id: int) -> WorkCycle:
        cycle = self._schedules.get_work_cycle(int(cycle_id))
        if not cycle:
            raise NotFoundError("Work cycle not found")
        return cycle

    def list_work_cycles(self) -> list[WorkCycle]:
        return list(self._schedules.list_work_cycles())

    def assign_work_cycle(self, actor: Actor, *, employee_id: int, cycle_id: Optional[int]) -> None:
        require(self._policy, actor, employee_id=employee_id, capability=Capability.CONFIGURE)

        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")
        if cycle_id is not None:
            self.get_work_cycle(cycle_id)
        if not self._employees.set_work_cycle(int(employee_id), work_cycle_id=cycle_id):
            raise NotFoundError("Employee not found")
        logger.info("employee %s assigned to work cycle %s", employee_id, cycle_id)

    def get_schedule_for_employee(self, employee_id: int) -> Optional[Schedule]:
        return schedule_for_employee(self._employees, self._schedules, employee_id)

    def get_work_cycle_for_employee(self, employee_id: int) -> Optional[WorkCycle]:
        return cycle_for(self._employees.get_by_id(int(employee_id)), self._schedules)

    def resolve_rate(self, schedule_id: int, instant: Union[str, datetime, time]) -> Optional[RateResolution]:
        if isinstance(instant, str):
            at: Union[datetime, time] = parse_clock_time(instant) if len(instant.strip()) <= 8 else parse_iso_datetime(instant)
        else:
            at = instant
        return resolve_rate(self.get_schedule(schedule_id), at)
