from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Schedule, WorkCycle


class ScheduleRepository(Protocol):
    """Schedules (with their owned periods/ranges) and the work cycles referencing them."""

    def create_schedule(self, schedule: Schedule) -> int:
        raise NotImplementedError

    def update_schedule(self, schedule: Schedule) -> bool:
        """Replace label/window/periods of an existing schedule (same id)."""

        raise NotImplementedError

    def get_schedule(self, schedule_id: int) -> Optional[Schedule]:
        raise NotImplementedError

    def list_schedules(self) -> Sequence[Schedule]:
        raise NotImplementedError

    def delete_schedule(self, schedule_id: int) -> bool:
        raise NotImplementedError

    def create_work_cycle(self, cycle: WorkCycle) -> int:
        raise NotImplementedError

    def update_work_cycle(self, cycle: WorkCycle) -> bool:
        raise NotImplementedError

    def get_work_cycle(self, cycle_id: int) -> Optional[WorkCycle]:
        raise NotImplementedError

    def list_work_cycles(self) -> Sequence[WorkCycle]:
        raise NotImplementedError

    def count_cycles_for_schedule(self, schedule_id: int) -> int:
        raise NotImplementedError
