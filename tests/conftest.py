from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from src.attendance_engine.attendance_engine.attendance.model import TimeEntry
from src.attendance_engine.attendance_engine.container import wire
from src.attendance_engine.attendance_engine.core.enums import (
    ApprovalStatus,
    ContractType,
    EmployeeStatus,
    Gender,
    Role,
    TimeEntryStatus,
)
from src.attendance_engine.attendance_engine.core.exceptions import DuplicateEntryError
from src.attendance_engine.attendance_engine.core.policy import Actor
from src.attendance_engine.attendance_engine.employees.model import Employee
from src.attendance_engine.attendance_engine.requests.model import Absence, Overtime, SpecialHours
from src.attendance_engine.attendance_engine.schedules.rate_model import build_schedule, build_work_cycle

STANDARD_DAY = {
    "label": "Standard day",
    "abbreviation": "STD",
    "scheduleType": "FIXED",
    "startTime": "08:00",
    "endTime": "17:00",
    "breakDuration": 60,
    "periods": [
        {"name": "Morning", "startTime": "08:00", "endTime": "12:00", "periodType": "REGULAR"},
        {"name": "Lunch", "startTime": "12:00", "endTime": "13:00", "periodType": "PAUSE"},
        {
            "name": "Afternoon",
            "startTime": "13:00",
            "endTime": "17:00",
            "periodType": "REGULAR",
            "timeRanges": [
                {"name": "Late afternoon", "startTime": "16:00", "endTime": "17:00", "rangeType": "OVERTIME"},
            ],
        },
    ],
}

NIGHT_SHIFT = {
    "label": "Night",
    "scheduleType": "EQUIPE",
    "startTime": "22:00",
    "endTime": "06:00",
    "periods": [
        {
            "name": "Night",
            "startTime": "22:00",
            "endTime": "06:00",
            "periodType": "REGULAR",
            "timeRanges": [{"name": "Night rate", "startTime": "22:00", "endTime": "06:00", "rangeType": "NUIT"}],
        },
    ],
}


class FakeEmployeesRepo:
    def __init__(self, employees=()):
        self._rows: dict[int, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> Employee:
        self._rows[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id):
        return self._rows.get(int(employee_id))

    def list_all(self):
        return sorted(self._rows.values(), key=lambda e: e.employee_id)

    def set_work_cycle(self, employee_id, *, work_cycle_id):
        emp = self._rows.get(int(employee_id))
        if not emp:
            return False
        self._rows[emp.employee_id] = replace(emp, work_cycle_id=work_cycle_id)
        return True


class FakeSchedulesRepo:
    def __init__(self):
        self._next_id = 1
        self._schedules = {}
        self._cycles = {}

    def _new_id(self):
        rid = self._next_id
        self._next_id += 1
        return rid

    def create_schedule(self, schedule):
        sid = self._new_id()
        self._schedules[sid] = replace(schedule, schedule_id=sid)
        return sid

    def update_schedule(self, schedule):
        if schedule.schedule_id not in self._schedules:
            return False
        self._schedules[schedule.schedule_id] = schedule
        return True

    def get_schedule(self, schedule_id):
        return self._schedules.get(int(schedule_id))

    def list_schedules(self):
        return [self._schedules[k] for k in sorted(self._schedules)]

    def delete_schedule(self, schedule_id):
        return self._schedules.pop(int(schedule_id), None) is not None

    def create_work_cycle(self, cycle):
        cid = self._new_id()
        self._cycles[cid] = replace(cycle, cycle_id=cid)
        return cid

    def update_work_cycle(self, cycle):
        if cycle.cycle_id not in self._cycles:
            return False
        self._cycles[cycle.cycle_id] = cycle
        return True

    def get_work_cycle(self, cycle_id):
        return self._cycles.get(int(cycle_id))

    def list_work_cycles(self):
        return [self._cycles[k] for k in sorted(self._cycles)]

    def count_cycles_for_schedule(self, schedule_id):
        return sum(1 for c in self._cycles.values() if c.schedule_id == int(schedule_id))


class FakeAttendanceRepo:
    def __init__(self):
        self._next_id = 1
        self._rows: dict[int, TimeEntry] = {}
        self.updates = 0

    def add(self, entry: TimeEntry) -> TimeEntry:
        self._rows[entry.entry_id] = entry
        self._next_id = max(self._next_id, entry.entry_id + 1)
        return entry

    def create_entry(self, *, employee_id, work_date, clock_in, status, note=None):
        if status == TimeEntryStatus.PENDING and any(
            e.employee_id == employee_id and e.work_date == work_date and e.status == TimeEntryStatus.PENDING
            for e in self._rows.values()
        ):
            raise DuplicateEntryError("An open time entry already exists for this day")
        eid = self._next_id
        self._next_id += 1
        self._rows[eid] = TimeEntry(
            entry_id=eid,
            employee_id=int(employee_id),
            work_date=work_date,
            clock_in=clock_in,
            clock_out=None,
            total_hours=0.0,
            status=status,
            note=note,
        )
        return eid

    def get_by_id(self, entry_id):
        return self._rows.get(int(entry_id))

    def find_open_entry(self, employee_id):
        open_rows = [
            e for e in self._rows.values() if e.employee_id == int(employee_id) and e.status == TimeEntryStatus.PENDING
        ]
        if not open_rows:
            return None
        return max(open_rows, key=lambda e: (e.clock_in or datetime.min, e.entry_id))

    def find_for_employee_and_date(self, employee_id, work_date):
        return [e for e in self._rows.values() if e.employee_id == int(employee_id) and e.work_date == work_date]

    def find_by_date_range(self, *, start_date, end_date, employee_id=None):
        return [
            e
            for e in self._rows.values()
            if start_date <= e.work_date <= end_date and (employee_id is None or e.employee_id == int(employee_id))
        ]

    def find_by_status(self, status, *, clock_in_before=None):
        return [
            e
            for e in self._rows.values()
            if e.status == status and (clock_in_before is None or (e.clock_in is not None and e.clock_in <= clock_in_before))
        ]

    def close_entry(self, *, entry_id, clock_out, total_hours, status):
        entry = self._rows.get(int(entry_id))
        if not entry or entry.status != TimeEntryStatus.PENDING:
            return False
        self._rows[entry.entry_id] = replace(entry, clock_out=clock_out, total_hours=total_hours, status=status)
        return True

    def update_entry(self, entry):
        if entry.entry_id not in self._rows:
            return False
        self._rows[entry.entry_id] = entry
        self.updates += 1
        return True


def _in_window(start, end, start_date, end_date):
    if start_date is not None and end < start_date:
        return False
    if end_date is not None and start > end_date:
        return False
    return True


class FakeRequestsRepo:
    def __init__(self):
        self._next_id = 1
        self._absences: dict[int, Absence] = {}
        self._overtimes: dict[int, Overtime] = {}
        self._specials: dict[int, SpecialHours] = {}

    def _new_id(self):
        rid = self._next_id
        self._next_id += 1
        return rid

    @staticmethod
    def _decide(rows, key, *, status, decided_by, decided_at):
        row = rows.get(int(key))
        if not row or row.status != ApprovalStatus.PENDING:
            return False
        rows[int(key)] = replace(row, status=status, approved_by=decided_by, approved_at=decided_at)
        return True

    # absences
    def create_absence(self, *, employee_id, absence_type, start_date, end_date, days, days_overridden, reason):
        rid = self._new_id()
        self._absences[rid] = Absence(
            absence_id=rid,
            employee_id=int(employee_id),
            absence_type=absence_type,
            start_date=start_date,
            end_date=end_date,
            days=days,
            days_overridden=days_overridden,
            reason=reason,
            status=ApprovalStatus.PENDING,
        )
        return rid

    def add_absence(self, absence: Absence) -> Absence:
        self._absences[absence.absence_id] = absence
        self._next_id = max(self._next_id, absence.absence_id + 1)
        return absence

    def get_absence(self, absence_id):
        return self._absences.get(int(absence_id))

    def update_absence(self, absence):
        current = self._absences.get(absence.absence_id)
        if not current or current.status != ApprovalStatus.PENDING:
            return False
        self._absences[absence.absence_id] = absence
        return True

    def decide_absence(self, *, absence_id, status, decided_by, decided_at):
        return self._decide(self._absences, absence_id, status=status, decided_by=decided_by, decided_at=decided_at)

    def find_absences(self, *, employee_id=None, status=None, start_date=None, end_date=None):
        return [
            a
            for a in self._absences.values()
            if (employee_id is None or a.employee_id == int(employee_id))
            and (status is None or a.status == status)
            and _in_window(a.start_date, a.end_date, start_date, end_date)
        ]

    # overtime
    def create_overtime(self, *, employee_id, work_date, hours, range_type, multiplier, reason):
        rid = self._new_id()
        self._overtimes[rid] = Overtime(
            overtime_id=rid,
            employee_id=int(employee_id),
            work_date=work_date,
            hours=hours,
            range_type=range_type,
            multiplier=multiplier,
            reason=reason,
            status=ApprovalStatus.PENDING,
        )
        return rid

    def add_overtime(self, overtime: Overtime) -> Overtime:
        self._overtimes[overtime.overtime_id] = overtime
        self._next_id = max(self._next_id, overtime.overtime_id + 1)
        return overtime

    def get_overtime(self, overtime_id):
        return self._overtimes.get(int(overtime_id))

    def decide_overtime(self, *, overtime_id, status, decided_by, decided_at):
        return self._decide(self._overtimes, overtime_id, status=status, decided_by=decided_by, decided_at=decided_at)

    def find_overtimes(self, *, employee_id=None, status=None, start_date=None, end_date=None):
        return [
            o
            for o in self._overtimes.values()
            if (employee_id is None or o.employee_id == int(employee_id))
            and (status is None or o.status == status)
            and _in_window(o.work_date, o.work_date, start_date, end_date)
        ]

    # special hours
    def create_special_hours(self, *, employee_id, work_date, hours, hour_type, multiplier, reason):
        rid = self._new_id()
        self._specials[rid] = SpecialHours(
            special_id=rid,
            employee_id=int(employee_id),
            work_date=work_date,
            hours=hours,
            hour_type=hour_type,
            multiplier=multiplier,
            reason=reason,
            status=ApprovalStatus.PENDING,
        )
        return rid

    def add_special_hours(self, special: SpecialHours) -> SpecialHours:
        self._specials[special.special_id] = special
        self._next_id = max(self._next_id, special.special_id + 1)
        return special

    def get_special_hours(self, special_id):
        return self._specials.get(int(special_id))

    def decide_special_hours(self, *, special_id, status, decided_by, decided_at):
        return self._decide(self._specials, special_id, status=status, decided_by=decided_by, decided_at=decided_at)

    def find_special_hours(self, *, employee_id=None, status=None, start_date=None, end_date=None):
        return [
            s
            for s in self._specials.values()
            if (employee_id is None or s.employee_id == int(employee_id))
            and (status is None or s.status == status)
            and _in_window(s.work_date, s.work_date, start_date, end_date)
        ]


def completed_entry(entry_id, employee_id, day: date, start: str, end: str, **overrides) -> TimeEntry:
    clock_in = datetime.fromisoformat(f"{day.isoformat()}T{start}")
    clock_out = datetime.fromisoformat(f"{day.isoformat()}T{end}")
    fields = dict(
        entry_id=entry_id,
        employee_id=employee_id,
        work_date=day,
        clock_in=clock_in,
        clock_out=clock_out,
        total_hours=round((clock_out - clock_in).total_seconds() / 3600.0, 2),
        status=TimeEntryStatus.COMPLETED,
    )
    fields.update(overrides)
    return TimeEntry(**fields)


def hours_entry(entry_id, employee_id, day: date, hours: float) -> TimeEntry:
    """Completed entry whose hours were set by a correction (no clock times)."""

    return TimeEntry(
        entry_id=entry_id,
        employee_id=employee_id,
        work_date=day,
        clock_in=None,
        clock_out=None,
        total_hours=hours,
        status=TimeEntryStatus.COMPLETED,
        hours_overridden=True,
    )


@pytest.fixture
def admin():
    return Actor(user_id=100, role=Role.ADMINISTRATOR)


@pytest.fixture
def employee_user():
    return Actor(user_id=1, role=Role.USER, employee_id=1)


@pytest.fixture
def engine():
    """In-memory repositories seeded with one schedule, one weekly cycle and two employees."""

    schedules = FakeSchedulesRepo()
    schedule_id = schedules.create_schedule(build_schedule(STANDARD_DAY))
    cycle_id = schedules.create_work_cycle(
        build_work_cycle({"name": "Weekly 40h", "cycleType": "WEEKLY", "weeklyHours": 40, "scheduleId": schedule_id})
    )

    employees = FakeEmployeesRepo(
        [
            Employee(
                employee_id=1,
                employee_number="E001",
                first_name="Alice",
                last_name="Martin",
                gender=Gender.FEMALE,
                work_cycle_id=cycle_id,
            ),
            Employee(
                employee_id=2,
                employee_number="E002",
                first_name="Bruno",
                last_name="Durand",
                gender=Gender.MALE,
                contract_type=ContractType.PART_TIME,
                status=EmployeeStatus.ACTIVE,
                work_cycle_id=cycle_id,
            ),
        ]
    )
    entries = FakeAttendanceRepo()
    requests = FakeRequestsRepo()

    container = wire(
        employees_repo=employees,
        schedules_repo=schedules,
        attendance_repo=entries,
        requests_repo=requests,
    )
    return SimpleNamespace(
        container=container,
        employees=employees,
        schedules=schedules,
        entries=entries,
        requests=requests,
        schedule_id=schedule_id,
        cycle_id=cycle_id,
    )


@pytest.fixture
def make_completed():
    return completed_entry


@pytest.fixture
def make_overridden():
    return hours_entry


@pytest.fixture
def standard_schedule():
    return build_schedule(STANDARD_DAY, schedule_id=1)


@pytest.fixture
def night_schedule():
    return build_schedule(NIGHT_SHIFT, schedule_id=2)
