from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...attendance.model import TimeEntry
from ...schedules.model import Schedule


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def worked_hours(self, entry: TimeEntry) -> float:
        raise NotImplementedError

    @abstractmethod
    def weighted_hours(self, entry: TimeEntry, schedule: Optional[Schedule]) -> float:
        """Worked hours with each minute weighted by the rate in effect."""

        raise NotImplementedError
