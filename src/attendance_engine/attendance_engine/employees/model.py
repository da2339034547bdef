from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import ContractType, EmployeeStatus, Gender


@dataclass(frozen=True)
class Employee:
    """Domain entity: employee identity plus the id of its assigned work cycle.

    Note: pure data object; the cycle (and through it the schedule) is a
    shared reference resolved by id, never embedded.
    """

    employee_id: int
    employee_number: str
    first_name: str
    last_name: str
    gender: Gender = Gender.UNKNOWN
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    contract_type: ContractType = ContractType.FULL_TIME
    email: Optional[str] = None
    phone: Optional[str] = None
    hire_date: Optional[date] = None
    work_cycle_id: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.employee_id,
            "employeeNumber": self.employee_number,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "gender": self.gender.value,
            "status": self.status.value,
            "contractType": self.contract_type.value,
            "hireDate": self.hire_date.isoformat() if self.hire_date else None,
            "workCycleId": self.work_cycle_id,
        }
