from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AbsenceType, ApprovalStatus, RangeType, SpecialHourType, normalize_enum
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, where_clause
from .model import Absence, Overtime, SpecialHours
from .repository import RequestRepository


def _optional_int(value) -> Optional[int]:
    return int(value) if value is not None else None


def _row_to_absence(r: dict) -> Absence:
    return Absence(
        absence_id=int(r["absence_id"]),
        employee_id=int(r["employee_id"]),
        absence_type=normalize_enum(AbsenceType, r["absence_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        days=float(r["days"]),
        days_overridden=as_bool(r.get("days_overridden")),
        reason=r.get("reason"),
        status=normalize_enum(ApprovalStatus, r["status"]),
        approved_by=_optional_int(r.get("approved_by")),
        approved_at=r.get("approved_at"),
    )


def _row_to_overtime(r: dict) -> Overtime:
    return Overtime(
        overtime_id=int(r["overtime_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        hours=float(r["hours"]),
        range_type=normalize_enum(RangeType, r.get("range_type") or RangeType.OVERTIME),
        multiplier=float(r["multiplier"]),
        reason=r.get("reason"),
        status=normalize_enum(ApprovalStatus, r["status"]),
        approved_by=_optional_int(r.get("approved_by")),
        approved_at=r.get("approved_at"),
    )


def _row_to_special(r: dict) -> SpecialHours:
    return SpecialHours(
        special_id=int(r["special_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        hours=float(r["hours"]),
        hour_type=normalize_enum(SpecialHourType, r["hour_type"]),
        multiplier=float(r["multiplier"]),
        reason=r.get("reason"),
        status=normalize_enum(ApprovalStatus, r["status"]),
        approved_by=_optional_int(r.get("approved_by")),
        approved_at=r.get("approved_at"),
    )


def _filters(
    *,
    employee_id: Optional[int],
    status: Optional[ApprovalStatus],
    start_date: Optional[date],
    end_date: Optional[date],
    start_column: str,
    end_column: str,
) -> tuple[str, tuple]:
    clauses: list[str] = []
    params: list[object] = []
    if employee_id is not None:
        clauses.append("employee_id=%s")
        params.append(int(employee_id))
    if status is not None:
        clauses.append("status=%s")
        params.append(status.value)
    if end_date is not None:
        clauses.append(f"{start_column} <= %s")
        params.append(end_date)
    if start_date is not None:
        clauses.append(f"{end_column} >= %s")
        params.append(start_date)
    return where_clause(clauses), tuple(params)


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _decide(self, table: str, id_column: str, record_id: int, status: ApprovalStatus, decided_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE {table}
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE {id_column}=%s AND status=%s
                """,
                (status.value, int(decided_by), decided_at, int(record_id), ApprovalStatus.PENDING.value),
            )
            return cur.rowcount > 0

    # Absences
    def create_absence(
        self,
        *,
        employee_id: int,
        absence_type: AbsenceType,
        start_date: date,
        end_date: date,
        days: float,
        days_overridden: bool,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO absences(employee_id, absence_type, start_date, end_date, days, days_overridden, reason)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), absence_type.value, start_date, end_date, days, int(days_overridden), reason),
            )
            return int(cur.lastrowid)

    def get_absence(self, absence_id: int) -> Optional[Absence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM absences WHERE absence_id=%s", (int(absence_id),))
            r = fetchone(cur)
            return _row_to_absence(r) if r else None

    def update_absence(self, absence: Absence) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE absences
                SET absence_type=%s, start_date=%s, end_date=%s, days=%s, days_overridden=%s, reason=%s
                WHERE absence_id=%s AND status=%s
                """,
                (
                    absence.absence_type.value,
                    absence.start_date,
                    absence.end_date,
                    absence.days,
                    int(absence.days_overridden),
                    absence.reason,
                    int(absence.absence_id),
                    ApprovalStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def decide_absence(self, *, absence_id: int, status: ApprovalStatus, decided_by: int, decided_at: datetime) -> bool:
        return self._decide("absences", "absence_id", absence_id, status, decided_by, decided_at)

    def find_absences(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Absence]:
        where, params = _filters(
            employee_id=employee_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            start_column="start_date",
            end_column="end_date",
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM absences {where} ORDER BY start_date, absence_id", params)
            return [_row_to_absence(r) for r in fetchall(cur)]

    # Overtime
    def create_overtime(
        self,
        *,
        employee_id: int,
        work_date: date,
        hours: float,
        range_type: RangeType,
        multiplier: float,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtimes(employee_id, work_date, hours, range_type, multiplier, reason)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, hours, range_type.value, multiplier, reason),
            )
            return int(cur.lastrowid)

    def get_overtime(self, overtime_id: int) -> Optional[Overtime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM overtimes WHERE overtime_id=%s", (int(overtime_id),))
            r = fetchone(cur)
            return _row_to_overtime(r) if r else None

    def decide_overtime(self, *, overtime_id: int, status: ApprovalStatus, decided_by: int, decided_at: datetime) -> bool:
        return self._decide("overtimes", "overtime_id", overtime_id, status, decided_by, decided_at)

    def find_overtimes(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[Overtime]:
        where, params = _filters(
            employee_id=employee_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            start_column="work_date",
            end_column="work_date",
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM overtimes {where} ORDER BY work_date, overtime_id", params)
            return [_row_to_overtime(r) for r in fetchall(cur)]

    # Special hours
    def create_special_hours(
        self,
        *,
        employee_id: int,
        work_date: date,
        hours: float,
        hour_type: SpecialHourType,
        multiplier: float,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO special_hours(employee_id, work_date, hours, hour_type, multiplier, reason)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, hours, hour_type.value, multiplier, reason),
            )
            return int(cur.lastrowid)

    def get_special_hours(self, special_id: int) -> Optional[SpecialHours]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM special_hours WHERE special_id=%s", (int(special_id),))
            r = fetchone(cur)
            return _row_to_special(r) if r else None

    def decide_special_hours(self, *, special_id: int, status: ApprovalStatus, decided_by: int, decided_at: datetime) -> bool:
        return self._decide("special_hours", "special_id", special_id, status, decided_by, decided_at)

    def find_special_hours(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[ApprovalStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[SpecialHours]:
        where, params = _filters(
            employee_id=employee_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            start_column="work_date",
            end_column="work_date",
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM special_hours {where} ORDER BY work_date, special_id", params)
            return [_row_to_special(r) for r in fetchall(cur)]
