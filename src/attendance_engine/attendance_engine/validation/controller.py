from __future__ import annotations

from flask import Flask, request

from ..common.payload import pick
from ..common.web import arg, current_actor, flag, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.validation_service

    @app.route("/api/time-entries/validation-rules", methods=["GET"], endpoint="validation_rules")
    @login_required
    def validation_rules():
        return ok(service.list_rules())

    @app.route("/api/time-entries/entry/<int:entry_id>/validate", methods=["POST"], endpoint="validate_entry")
    @login_required
    def validate_entry(entry_id: int):
        auto_correct = flag(request.args.get("autoCorrect") or pick(json_body(), "auto_correct"))
        report = service.validate(current_actor(), entry_id, auto_correct=auto_correct)
        return ok(report.to_dict())

    @app.route("/api/time-entries/<int:employee_id>/validate-period", methods=["POST"], endpoint="validate_period")
    @login_required
    def validate_period(employee_id: int):
        body = json_body()
        result = service.validate_period(
            current_actor(),
            employee_id,
            start=pick(body, "start_date"),
            end=pick(body, "end_date"),
            auto_correct=flag(pick(body, "auto_correct")),
        )
        return ok(result.to_dict())

    @app.route("/api/time-entries/<int:employee_id>/validation-stats", methods=["GET"], endpoint="validation_stats")
    @login_required
    def validation_stats(employee_id: int):
        stats = service.validation_statistics(
            current_actor(),
            employee_id,
            start=arg("startDate"),
            end=arg("endDate"),
        )
        return ok(stats.to_dict())
