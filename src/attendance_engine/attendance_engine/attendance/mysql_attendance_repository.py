from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import TimeEntryStatus, normalize_enum
from ..core.exceptions import DuplicateEntryError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, is_duplicate_key, where_clause
from .model import TimeEntry
from .repository import AttendanceRepository

_COLUMNS = """
    entry_id, employee_id, work_date, clock_in, clock_out, total_hours, hours_overridden,
    status, is_validated, validated_at, validated_by, note
"""


def _row_to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(r["entry_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        total_hours=float(r.get("total_hours") or 0),
        hours_overridden=as_bool(r.get("hours_overridden")),
        status=normalize_enum(TimeEntryStatus, r["status"]),
        is_validated=as_bool(r.get("is_validated")),
        validated_at=r.get("validated_at"),
        validated_by=int(r["validated_by"]) if r.get("validated_by") is not None else None,
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_entry(
        self,
        *,
        employee_id: int,
        work_date: date,
        clock_in: Optional[datetime],
        status: TimeEntryStatus,
        note: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO time_entries(employee_id, work_date, clock_in, status, note)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(employee_id), work_date, clock_in, status.value, note),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateEntryError("An open time entry already exists for this day") from e
            raise

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM time_entries WHERE entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def find_open_entry(self, employee_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM time_entries
                WHERE employee_id=%s AND status=%s
                ORDER BY clock_in DESC, entry_id DESC
                LIMIT 1
                """,
                (int(employee_id), TimeEntryStatus.PENDING.value),
            )
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def find_for_employee_and_date(self, employee_id: int, work_date: date) -> Sequence[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM time_entries
                WHERE employee_id=%s AND work_date=%s
                ORDER BY entry_id
                """,
                (int(employee_id), work_date),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def find_by_date_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_entries {where_clause(clauses)} ORDER BY work_date, entry_id",
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def find_by_status(self, status: TimeEntryStatus, *, clock_in_before: Optional[datetime] = None) -> Sequence[TimeEntry]:
        clauses = ["status=%s"]
        params: list[object] = [status.value]
        if clock_in_before is not None:
            clauses.append("clock_in <= %s")
            params.append(clock_in_before)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_entries {where_clause(clauses)} ORDER BY clock_in",
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def close_entry(
        self,
        *,
        entry_id: int,
        clock_out: Optional[datetime],
        total_hours: float,
        status: TimeEntryStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET clock_out=%s, total_hours=%s, status=%s
                WHERE entry_id=%s AND status=%s
                """,
                (clock_out, total_hours, status.value, int(entry_id), TimeEntryStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def update_entry(self, entry: TimeEntry) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE time_entries
                    SET clock_in=%s, clock_out=%s, total_hours=%s, hours_overridden=%s, status=%s,
                        is_validated=%s, validated_at=%s, validated_by=%s, note=%s
                    WHERE entry_id=%s
                    """,
                    (
                        entry.clock_in,
                        entry.clock_out,
                        entry.total_hours,
                        int(entry.hours_overridden),
                        entry.status.value,
                        int(entry.is_validated),
                        entry.validated_at,
                        entry.validated_by,
                        entry.note,
                        int(entry.entry_id),
                    ),
                )
                return cur.rowcount > 0
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateEntryError("An open time entry already exists for this day") from e
            raise
