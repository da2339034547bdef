from __future__ import annotations

from collections import defaultdict
from typing import Optional, Sequence

from ..core.enums import CycleType, PeriodType, RangeType, ScheduleType, normalize_enum
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Period, Schedule, TimeRange, WorkCycle
from .repository import ScheduleRepository


def _optional_float(value) -> Optional[float]:
    return float(value) if value is not None else None


def _row_to_cycle(r: dict) -> WorkCycle:
    return WorkCycle(
        cycle_id=int(r["cycle_id"]),
        name=r["name"],
        cycle_type=normalize_enum(CycleType, r["cycle_type"]),
        cycle_days=int(r["cycle_days"]),
        weekly_hours=float(r["weekly_hours"]),
        overtime_threshold=_optional_float(r.get("overtime_threshold")),
        schedule_id=int(r["schedule_id"]),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _insert_periods(cur, schedule_id: int, periods: Sequence[Period]) -> None:
        for position, period in enumerate(periods):
            cur.execute(
                """
                INSERT INTO schedule_periods(schedule_id, position, name, start_time, end_time, period_type)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (schedule_id, position, period.name, period.start_time, period.end_time, period.period_type.value),
            )
            period_id = int(cur.lastrowid)
            for range_position, r in enumerate(period.time_ranges):
                cur.execute(
                    """
                    INSERT INTO schedule_time_ranges(period_id, position, name, start_time, end_time, range_type, multiplier)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (period_id, range_position, r.name, r.start_time, r.end_time, r.range_type.value, r.multiplier),
                )

    @staticmethod
    def _load(cur, rows: list[dict]) -> list[Schedule]:
        if not rows:
            return []

        ids = [int(r["schedule_id"]) for r in rows]
        marks = ",".join(["%s"] * len(ids))
        cur.execute(
            f"""
            SELECT p.period_id, p.schedule_id, p.name, p.start_time, p.end_time, p.period_type
            FROM schedule_periods p
            WHERE p.schedule_id IN ({marks})
            ORDER BY p.schedule_id, p.position
            """,
            tuple(ids),
        )
        period_rows = fetchall(cur)

        ranges: dict[int, list[TimeRange]] = defaultdict(list)
        if period_rows:
            period_ids = [int(p["period_id"]) for p in period_rows]
            cur.execute(
                f"""
                SELECT period_id, name, start_time, end_time, range_type, multiplier
                FROM schedule_time_ranges
                WHERE period_id IN ({",".join(["%s"] * len(period_ids))})
                ORDER BY period_id, position
                """,
                tuple(period_ids),
            )
            for r in fetchall(cur):
                ranges[int(r["period_id"])].append(
                    TimeRange(
                        name=r["name"],
                        start_time=normalize_mysql_time(r["start_time"]),
                        end_time=normalize_mysql_time(r["end_time"]),
                        range_type=normalize_enum(RangeType, r["range_type"]),
                        multiplier=float(r["multiplier"]),
                    )
                )

        periods: dict[int, list[Period]] = defaultdict(list)
        for p in period_rows:
            periods[int(p["schedule_id"])].append(
                Period(
                    name=p["name"],
                    start_time=normalize_mysql_time(p["start_time"]),
                    end_time=normalize_mysql_time(p["end_time"]),
                    period_type=normalize_enum(PeriodType, p["period_type"]),
                    time_ranges=tuple(ranges.get(int(p["period_id"]), ())),
                )
            )

        return [
            Schedule(
                schedule_id=int(r["schedule_id"]),
                label=r["label"],
                abbreviation=r.get("abbreviation"),
                schedule_type=normalize_enum(ScheduleType, r["schedule_type"]),
                start_time=normalize_mysql_time(r["start_time"]),
                end_time=normalize_mysql_time(r["end_time"]),
                break_minutes=int(r.get("break_minutes") or 0),
                theoretical_day_hours=float(r["theoretical_day_hours"]),
                theoretical_morning_hours=_optional_float(r.get("theoretical_morning_hours")),
                theoretical_afternoon_hours=_optional_float(r.get("theoretical_afternoon_hours")),
                periods=tuple(periods.get(int(r["schedule_id"]), ())),
            )
            for r in rows
        ]

    def create_schedule(self, schedule: Schedule) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_schedules(
                    label, abbreviation, schedule_type, start_time, end_time, break_minutes,
                    theoretical_day_hours, theoretical_morning_hours, theoretical_afternoon_hours
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    schedule.label,
                    schedule.abbreviation,
                    schedule.schedule_type.value,
                    schedule.start_time,
                    schedule.end_time,
                    schedule.break_minutes,
                    schedule.theoretical_day_hours,
                    schedule.theoretical_morning_hours,
                    schedule.theoretical_afternoon_hours,
                ),
            )
            schedule_id = int(cur.lastrowid)
            self._insert_periods(cur, schedule_id, schedule.periods)
            return schedule_id

    def update_schedule(self, schedule: Schedule) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_schedules
                SET label=%s, abbreviation=%s, schedule_type=%s, start_time=%s, end_time=%s, break_minutes=%s,
                    theoretical_day_hours=%s, theoretical_morning_hours=%s, theoretical_afternoon_hours=%s
                WHERE schedule_id=%s
                """,
                (
                    schedule.label,
                    schedule.abbreviation,
                    schedule.schedule_type.value,
                    schedule.start_time,
                    schedule.end_time,
                    schedule.break_minutes,
                    schedule.theoretical_day_hours,
                    schedule.theoretical_morning_hours,
                    schedule.theoretical_afternoon_hours,
                    int(schedule.schedule_id),
                ),
            )
            if cur.rowcount <= 0:
                return False
            # Periods are owned values: replace them wholesale (ranges cascade).
            cur.execute("DELETE FROM schedule_periods WHERE schedule_id=%s", (int(schedule.schedule_id),))
            self._insert_periods(cur, int(schedule.schedule_id), schedule.periods)
            return True

    def get_schedule(self, schedule_id: int) -> Optional[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM work_schedules WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            if not r:
                return None
            return self._load(cur, [r])[0]

    def list_schedules(self) -> Sequence[Schedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM work_schedules ORDER BY label")
            return self._load(cur, fetchall(cur))

    def delete_schedule(self, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM work_schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def create_work_cycle(self, cycle: WorkCycle) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_cycles(name, cycle_type, cycle_days, weekly_hours, overtime_threshold, schedule_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    cycle.name,
                    cycle.cycle_type.value,
                    cycle.cycle_days,
                    cycle.weekly_hours,
                    cycle.overtime_threshold,
                    cycle.schedule_id,
                ),
            )
            return int(cur.lastrowid)

    def update_work_cycle(self, cycle: WorkCycle) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_cycles
                SET name=%s, cycle_type=%s, cycle_days=%s, weekly_hours=%s, overtime_threshold=%s, schedule_id=%s
                WHERE cycle_id=%s
                """,
                (
                    cycle.name,
                    cycle.cycle_type.value,
                    cycle.cycle_days,
                    cycle.weekly_hours,
                    cycle.overtime_threshold,
                    cycle.schedule_id,
                    int(cycle.cycle_id),
                ),
            )
            return cur.rowcount > 0

    def get_work_cycle(self, cycle_id: int) -> Optional[WorkCycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM work_cycles WHERE cycle_id=%s", (int(cycle_id),))
            r = fetchone(cur)
            return _row_to_cycle(r) if r else None

    def list_work_cycles(self) -> Sequence[WorkCycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM work_cycles ORDER BY name")
            return [_row_to_cycle(r) for r in fetchall(cur)]

    def count_cycles_for_schedule(self, schedule_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM work_cycles WHERE schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
