from __future__ import annotations

from flask import Flask

from ..common.payload import pick
from ..common.web import arg, current_actor, json_body, login_required, ok
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/api/schedules", methods=["GET"], endpoint="list_schedules")
    @login_required
    def list_schedules():
        return ok([s.to_dict() for s in service.list_schedules()])

    @app.route("/api/schedules", methods=["POST"], endpoint="create_schedule")
    @login_required
    def create_schedule():
        schedule = service.create_schedule(current_actor(), json_body())
        return ok(schedule.to_dict(), 201)

    @app.route("/api/schedules/<int:schedule_id>", methods=["GET"], endpoint="get_schedule")
    @login_required
    def get_schedule(schedule_id: int):
        return ok(service.get_schedule(schedule_id).to_dict())

    @app.route("/api/schedules/<int:schedule_id>", methods=["PUT"], endpoint="update_schedule")
    @login_required
    def update_schedule(schedule_id: int):
        schedule = service.update_schedule(current_actor(), schedule_id, json_body())
        return ok(schedule.to_dict())

    @app.route("/api/schedules/<int:schedule_id>", methods=["DELETE"], endpoint="delete_schedule")
    @login_required
    def delete_schedule(schedule_id: int):
        service.delete_schedule(current_actor(), schedule_id)
        return ok()

    @app.route("/api/schedules/<int:schedule_id>/rate", methods=["GET"], endpoint="resolve_rate")
    @login_required
    def resolve_rate(schedule_id: int):
        at = arg("at")
        if not at:
            raise ValidationError("Query parameter 'at' is required")
        resolution = service.resolve_rate(schedule_id, at)
        return ok(resolution.to_dict() if resolution else None)

    @app.route("/api/work-cycles", methods=["GET"], endpoint="list_work_cycles")
    @login_required
    def list_work_cycles():
        return ok([c.to_dict() for c in service.list_work_cycles()])

    @app.route("/api/work-cycles", methods=["POST"], endpoint="create_work_cycle")
    @login_required
    def create_work_cycle():
        cycle = service.create_work_cycle(current_actor(), json_body())
        return ok(cycle.to_dict(), 201)

    @app.route("/api/work-cycles/<int:cycle_id>", methods=["PUT"], endpoint="update_work_cycle")
    @login_required
    def update_work_cycle(cycle_id: int):
        cycle = service.update_work_cycle(current_actor(), cycle_id, json_body())
        return ok(cycle.to_dict())

    @app.route("/api/employees/<int:employee_id>/work-cycle", methods=["PUT"], endpoint="assign_work_cycle")
    @login_required
    def assign_work_cycle(employee_id: int):
        cycle_id = pick(json_body(), "cycle_id")
        service.assign_work_cycle(
            current_actor(),
            employee_id=employee_id,
            cycle_id=int(cycle_id) if cycle_id is not None else None,
        )
        return ok({"employeeId": employee_id, "workCycleId": cycle_id})

    @app.route("/api/employees/<int:employee_id>/schedule", methods=["GET"], endpoint="employee_schedule")
    @login_required
    def employee_schedule(employee_id: int):
        schedule = service.get_schedule_for_employee(employee_id)
        if not schedule:
            raise NotFoundError("No schedule assigned")
        return ok(schedule.to_dict())
