from __future__ import annotations

from flask import Flask, request

from ..common.http import date_arg, int_arg, json_body, ok
from ..common.validators import require_enum
from ..container import Container
from ..core.enums import AdjustmentType


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/<int:employee_id>/days", methods=["GET"], endpoint="attendance_days")
    def attendance_days(employee_id: int):
        records = container.attendance_service.day_records(
            employee_id=employee_id,
            start=date_arg(request.args.get("start"), "start"),
            end=date_arg(request.args.get("end"), "end"),
        )
        return ok([r.to_dict() for r in records])

    @app.route("/api/attendance/<int:employee_id>/summary", methods=["GET"], endpoint="attendance_summary")
    def attendance_summary(employee_id: int):
        metrics = container.attendance_service.summarize(
            employee_id=employee_id,
            start=date_arg(request.args.get("start"), "start"),
            end=date_arg(request.args.get("end"), "end"),
        )
        return ok(metrics.to_dict())

    @app.route("/api/attendance/adjustments", methods=["POST"], endpoint="attendance_adjustment")
    def attendance_adjustment():
        data = json_body()
        adjustment = container.attendance_service.record_adjustment(
            employee_id=int_arg(data.get("employee_id"), "employee_id"),
            work_date=date_arg(data.get("work_date"), "work_date"),
            adjustment_type=require_enum(AdjustmentType, data.get("adjustment_type"), "adjustment_type"),
            note=data.get("note", ""),
            created_by=data.get("created_by", ""),
            adjusted_in=data.get("adjusted_in", ""),
            adjusted_out=data.get("adjusted_out", ""),
        )
        return ok(
            {
                "employee_id": adjustment.employee_id,
                "work_date": adjustment.work_date.isoformat(),
                "adjustment_type": adjustment.adjustment_type.value,
            },
            201,
        )
