from __future__ import annotations

from datetime import date

from flask import Flask

from ..common.web import arg, current_actor, login_required, ok
from ..container import Container
from ..core.exceptions import ValidationError


def _int_arg(name: str, default: int) -> int:
    value = arg(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def _optional_int_arg(name: str):
    return _int_arg(name, 0) if arg(name) is not None else None


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service
    dashboard = container.dashboard_service

    @app.route("/api/reports/period-summary", methods=["GET"], endpoint="period_summary")
    @login_required
    def period_summary():
        summary = payroll.period_summary(
            current_actor(),
            start=arg("startDate"),
            end=arg("endDate"),
            employee_id=_optional_int_arg("employeeId"),
        )
        return ok(summary.to_dict())

    @app.route("/api/reports/monthly", methods=["GET"], endpoint="monthly_report")
    @login_required
    def monthly_report():
        today = date.today()
        summary = payroll.monthly_report(
            current_actor(),
            year=_int_arg("year", today.year),
            month=_int_arg("month", today.month),
            employee_id=_optional_int_arg("employeeId"),
        )
        return ok(summary.to_dict())

    @app.route("/api/reports/payslip/<int:employee_id>", methods=["GET"], endpoint="payslip")
    @login_required
    def payslip(employee_id: int):
        slip = payroll.payslip(current_actor(), employee_id, start=arg("startDate"), end=arg("endDate"))
        return ok(slip.to_dict())

    @app.route("/api/reports/time-balance/<int:employee_id>", methods=["GET"], endpoint="time_balance")
    @login_required
    def time_balance(employee_id: int):
        balance = payroll.time_balance(current_actor(), employee_id, start=arg("startDate"), end=arg("endDate"))
        return ok(balance.to_dict())

    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard_statistics")
    @login_required
    def dashboard_statistics():
        today = date.today()
        stats = dashboard.dashboard_statistics(
            current_actor(),
            year=_int_arg("year", today.year),
            month=_int_arg("month", today.month),
            top_n=_optional_int_arg("topN"),
        )
        return ok(stats.to_dict())
