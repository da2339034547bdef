from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ContractType, EmployeeStatus, Gender, normalize_enum
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, employee_number, first_name, last_name, email, phone,
    gender, status, contract_type, hire_date, work_cycle_id
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_number=str(r["employee_number"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r.get("email"),
        phone=r.get("phone"),
        gender=normalize_enum(Gender, r.get("gender") or Gender.UNKNOWN),
        status=normalize_enum(EmployeeStatus, r.get("status") or EmployeeStatus.ACTIVE),
        contract_type=normalize_enum(ContractType, r.get("contract_type") or ContractType.FULL_TIME),
        hire_date=r.get("hire_date"),
        work_cycle_id=int(r["work_cycle_id"]) if r.get("work_cycle_id") is not None else None,
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY last_name, first_name")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def set_work_cycle(self, employee_id: int, *, work_cycle_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET work_cycle_id=%s WHERE employee_id=%s",
                (work_cycle_id, int(employee_id)),
            )
            return cur.rowcount > 0
