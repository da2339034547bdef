from __future__ import annotations

from typing import Optional

from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import Schedule, WorkCycle
from .repository import ScheduleRepository


def cycle_for(employee: Optional[Employee], schedules: ScheduleRepository) -> Optional[WorkCycle]:
    if not employee or employee.work_cycle_id is None:
        return None
    return schedules.get_work_cycle(employee.work_cycle_id)


def schedule_for(employee: Optional[Employee], schedules: ScheduleRepository) -> Optional[Schedule]:
    """Employee -> WorkCycle -> Schedule, resolved by id at call time."""

    cycle = cycle_for(employee, schedules)
    if not cycle:
        return None
    return schedules.get_schedule(cycle.schedule_id)


def schedule_for_employee(
    employees: EmployeeRepository,
    schedules: ScheduleRepository,
    employee_id: int,
) -> Optional[Schedule]:
    return schedule_for(employees.get_by_id(int(employee_id)), schedules)
