from __future__ import annotations

from flask import Flask, request

from ..common.http import date_arg, int_arg, json_body, ok
from ..common.validators import require_enum
from ..container import Container
from ..core.enums import LeaveType


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves", methods=["POST"], endpoint="leave_submit")
    def leave_submit():
        data = json_body()
        request_id = container.leave_service.submit(
            employee_id=int_arg(data.get("employee_id"), "employee_id"),
            leave_type=require_enum(LeaveType, data.get("leave_type"), "leave_type"),
            start_date=date_arg(data.get("start_date"), "start_date"),
            end_date=date_arg(data.get("end_date"), "end_date"),
            reason=data.get("reason", ""),
        )
        return ok({"request_id": request_id}, 201)

    @app.route("/api/leaves/<int:request_id>/approve", methods=["POST"], endpoint="leave_approve")
    def leave_approve(request_id: int):
        data = json_body()
        overage = container.leave_service.approve(request_id=request_id, decided_by=data.get("decided_by", ""))
        return ok({"request_id": request_id, "overage": overage.to_dict()})

    @app.route("/api/leaves/<int:request_id>/reject", methods=["POST"], endpoint="leave_reject")
    def leave_reject(request_id: int):
        data = json_body()
        container.leave_service.reject(request_id=request_id, decided_by=data.get("decided_by", ""))
        return ok({"request_id": request_id})

    @app.route("/api/leaves/<int:request_id>/cancel", methods=["POST"], endpoint="leave_cancel")
    def leave_cancel(request_id: int):
        data = json_body()
        container.leave_service.cancel(request_id=request_id, decided_by=data.get("decided_by", ""))
        return ok({"request_id": request_id})

    @app.route("/api/leaves/overage", methods=["GET"], endpoint="leave_overage")
    def leave_overage():
        overage = container.leave_service.check_overage(
            employee_id=int_arg(request.args.get("employee_id"), "employee_id"),
            leave_type=require_enum(LeaveType, request.args.get("leave_type"), "leave_type"),
            fiscal_year=int_arg(request.args.get("fiscal_year"), "fiscal_year"),
            requested_days=int_arg(request.args.get("requested_days", 0), "requested_days"),
        )
        return ok(overage.to_dict())
