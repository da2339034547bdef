from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_DASHBOARD_TOP_N,
    DEFAULT_MAX_DAILY_HOURS,
    DEFAULT_OPEN_ENTRY_GRACE_HOURS,
    DEFAULT_SCHEDULE_TOLERANCE_MINUTES,
    DEFAULT_TREND_MONTHS,
)
from .core.policy import AccessPolicy, RoleAccessPolicy
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .payroll.dashboard import DashboardService
from .payroll.service import PayrollService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.service import RequestService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .validation.service import ValidationService


@dataclass(frozen=True)
class EngineSettings:
    max_daily_hours: float = DEFAULT_MAX_DAILY_HOURS
    schedule_tolerance_minutes: int = DEFAULT_SCHEDULE_TOLERANCE_MINUTES
    open_entry_grace_hours: int = DEFAULT_OPEN_ENTRY_GRACE_HOURS
    dashboard_top_n: int = DEFAULT_DASHBOARD_TOP_N
    trend_months: int = DEFAULT_TREND_MONTHS

    @classmethod
    def from_settings(cls, settings: Any) -> "EngineSettings":
        return cls(
            max_daily_hours=float(getattr(settings, "MAX_DAILY_HOURS", DEFAULT_MAX_DAILY_HOURS)),
            schedule_tolerance_minutes=int(getattr(settings, "SCHEDULE_TOLERANCE_MINUTES", DEFAULT_SCHEDULE_TOLERANCE_MINUTES)),
            open_entry_grace_hours=int(getattr(settings, "OPEN_ENTRY_GRACE_HOURS", DEFAULT_OPEN_ENTRY_GRACE_HOURS)),
            dashboard_top_n=int(getattr(settings, "DASHBOARD_TOP_N", DEFAULT_DASHBOARD_TOP_N)),
            trend_months=int(getattr(settings, "TREND_MONTHS", DEFAULT_TREND_MONTHS)),
        )


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: Any
    schedules_repo: Any
    attendance_repo: Any
    requests_repo: Any

    schedule_service: ScheduleService
    attendance_service: AttendanceService
    validation_service: ValidationService
    request_service: RequestService
    payroll_service: PayrollService
    dashboard_service: DashboardService


def wire(
    *,
    employees_repo,
    schedules_repo,
    attendance_repo,
    requests_repo,
    settings: Optional[EngineSettings] = None,
    policy: Optional[AccessPolicy] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build every service over the given repositories (MySQL or in-memory)."""

    settings = settings or EngineSettings()
    policy = policy or RoleAccessPolicy()

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        schedule_service=ScheduleService(schedules_repo, employees_repo, policy=policy),
        attendance_service=AttendanceService(
            attendance_repo,
            employees_repo,
            policy=policy,
            open_entry_grace_hours=settings.open_entry_grace_hours,
        ),
        validation_service=ValidationService(
            attendance_repo,
            employees_repo,
            schedules_repo,
            policy=policy,
            max_daily_hours=settings.max_daily_hours,
            tolerance_minutes=settings.schedule_tolerance_minutes,
        ),
        request_service=RequestService(requests_repo, employees_repo, policy=policy),
        payroll_service=PayrollService(attendance_repo, requests_repo, employees_repo, schedules_repo, policy=policy),
        dashboard_service=DashboardService(
            attendance_repo,
            requests_repo,
            employees_repo,
            schedules_repo,
            policy=policy,
            top_n=settings.dashboard_top_n,
            trend_months=settings.trend_months,
        ),
    )


def build_container(*, db_config: dict, settings: Optional[EngineSettings] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return wire(
        employees_repo=MySQLEmployeeRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        settings=settings,
        conn=conn,
    )
