from __future__ import annotations

from flask import Flask

from ..common.payload import pick
from ..common.web import arg, current_actor, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/time-entries/<int:employee_id>/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in(employee_id: int):
        body = json_body()
        entry = service.clock_in(current_actor(), employee_id, at=pick(body, "at"))
        return ok(entry.to_dict(), 201)

    @app.route("/api/time-entries/<int:employee_id>/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out(employee_id: int):
        body = json_body()
        entry = service.clock_out(current_actor(), employee_id, at=pick(body, "at"))
        return ok(entry.to_dict())

    @app.route("/api/time-entries/<int:employee_id>/absent", methods=["POST"], endpoint="mark_absent")
    @login_required
    def mark_absent(employee_id: int):
        body = json_body()
        entry = service.mark_absent(
            current_actor(),
            employee_id,
            work_date=pick(body, "date") or pick(body, "work_date"),
            note=pick(body, "note"),
        )
        return ok(entry.to_dict(), 201)

    @app.route("/api/time-entries/entry/<int:entry_id>", methods=["GET"], endpoint="get_time_entry")
    @login_required
    def get_time_entry(entry_id: int):
        return ok(service.get_entry(entry_id).to_dict())

    @app.route("/api/time-entries/entry/<int:entry_id>", methods=["PUT"], endpoint="correct_time_entry")
    @login_required
    def correct_time_entry(entry_id: int):
        body = json_body()
        entry = service.correct_entry(
            current_actor(),
            entry_id,
            clock_in=pick(body, "clock_in"),
            clock_out=pick(body, "clock_out"),
            total_hours=pick(body, "total_hours"),
            status=pick(body, "status"),
            note=pick(body, "note"),
        )
        return ok(entry.to_dict())

    @app.route("/api/time-entries/<int:employee_id>", methods=["GET"], endpoint="list_time_entries")
    @login_required
    def list_time_entries(employee_id: int):
        entries = service.list_entries(
            current_actor(),
            employee_id,
            start=arg("startDate") or arg("start"),
            end=arg("endDate") or arg("end"),
        )
        return ok([e.to_dict() for e in entries])
