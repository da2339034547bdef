from __future__ import annotations

from flask import Flask

from ..common.payload import pick
from ..common.web import arg, current_actor, json_body, login_required, ok
from ..container import Container


def _listing(data: dict) -> dict:
    return {key: [item.to_dict() for item in items] for key, items in data.items()}


def register(app: Flask, container: Container) -> None:
    service = container.request_service

    @app.route("/api/absences/<int:employee_id>", methods=["POST"], endpoint="request_absence")
    @login_required
    def request_absence(employee_id: int):
        body = json_body()
        absence = service.request_absence(
            current_actor(),
            employee_id,
            absence_type=pick(body, "type") or pick(body, "absence_type"),
            start_date=pick(body, "start_date"),
            end_date=pick(body, "end_date"),
            reason=pick(body, "reason"),
            days=pick(body, "days"),
        )
        return ok(absence.to_dict(), 201)

    @app.route("/api/absences/entry/<int:absence_id>", methods=["PUT"], endpoint="update_absence")
    @login_required
    def update_absence(absence_id: int):
        body = json_body()
        absence = service.update_absence(
            current_actor(),
            absence_id,
            absence_type=pick(body, "type") or pick(body, "absence_type"),
            start_date=pick(body, "start_date"),
            end_date=pick(body, "end_date"),
            reason=pick(body, "reason"),
            days=pick(body, "days"),
        )
        return ok(absence.to_dict())

    @app.route("/api/absences/entry/<int:absence_id>/decision", methods=["POST"], endpoint="decide_absence")
    @login_required
    def decide_absence(absence_id: int):
        absence = service.decide_absence(current_actor(), absence_id, pick(json_body(), "status", ""))
        return ok(absence.to_dict())

    @app.route("/api/overtimes/<int:employee_id>", methods=["POST"], endpoint="declare_overtime")
    @login_required
    def declare_overtime(employee_id: int):
        body = json_body()
        overtime = service.declare_overtime(
            current_actor(),
            employee_id,
            work_date=pick(body, "date") or pick(body, "work_date"),
            hours=pick(body, "hours"),
            range_type=pick(body, "range_type"),
            multiplier=pick(body, "multiplier"),
            reason=pick(body, "reason"),
        )
        return ok(overtime.to_dict(), 201)

    @app.route("/api/overtimes/entry/<int:overtime_id>/decision", methods=["POST"], endpoint="decide_overtime")
    @login_required
    def decide_overtime(overtime_id: int):
        overtime = service.decide_overtime(current_actor(), overtime_id, pick(json_body(), "status", ""))
        return ok(overtime.to_dict())

    @app.route("/api/special-hours/<int:employee_id>", methods=["POST"], endpoint="declare_special_hours")
    @login_required
    def declare_special_hours(employee_id: int):
        body = json_body()
        special = service.declare_special_hours(
            current_actor(),
            employee_id,
            work_date=pick(body, "date") or pick(body, "work_date"),
            hours=pick(body, "hours"),
            hour_type=pick(body, "type") or pick(body, "hour_type"),
            multiplier=pick(body, "multiplier"),
            reason=pick(body, "reason"),
        )
        return ok(special.to_dict(), 201)

    @app.route("/api/special-hours/entry/<int:special_id>/decision", methods=["POST"], endpoint="decide_special_hours")
    @login_required
    def decide_special_hours(special_id: int):
        special = service.decide_special_hours(current_actor(), special_id, pick(json_body(), "status", ""))
        return ok(special.to_dict())

    @app.route("/api/requests/<int:employee_id>", methods=["GET"], endpoint="employee_requests")
    @login_required
    def employee_requests(employee_id: int):
        data = service.list_for_employee(
            current_actor(),
            employee_id,
            status=arg("status"),
            start=arg("startDate"),
            end=arg("endDate"),
        )
        return ok(_listing(data))

    @app.route("/api/requests/pending", methods=["GET"], endpoint="pending_requests")
    @login_required
    def pending_requests():
        return ok(_listing(service.list_pending(current_actor())))
