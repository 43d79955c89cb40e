from __future__ import annotations

from flask import Flask

from ..common.http import json_body, ok
from ..common.validators import require_enum
from ..container import Container
from ..core.enums import SsoReconcileChoice


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll/<int:year>/<int:month>/<int:period_no>/generate", methods=["POST"], endpoint="payroll_generate")
    def payroll_generate(year: int, month: int, period_no: int):
        result = service.generate_batch(year=year, month=month, period_no=period_no)
        return ok(result.to_dict())

    @app.route("/api/payroll/<int:year>/<int:month>/sso/reconcile", methods=["POST"], endpoint="payroll_sso_reconcile")
    def payroll_sso_reconcile(year: int, month: int):
        data = json_body()
        decision = service.reconcile_sso(
            year,
            month,
            require_enum(SsoReconcileChoice, data.get("choice"), "choice"),
            decided_by=data.get("decided_by", ""),
            custom=data.get("custom"),
        )
        return ok(decision.to_dict())

    @app.route("/api/payroll/payslips/<batch_id>", methods=["GET"], endpoint="payroll_batch")
    def payroll_batch(batch_id: str):
        return ok([p.to_dict() for p in service.list_batch(batch_id=batch_id)])

    @app.route("/api/payroll/payslips/<batch_id>/<int:employee_id>", methods=["GET"], endpoint="payslip_detail")
    def payslip_detail(batch_id: str, employee_id: int):
        return ok(service.get_payslip(batch_id=batch_id, employee_id=employee_id).to_dict())

    @app.route("/api/payroll/payslips/<batch_id>/<int:employee_id>/lines", methods=["POST"], endpoint="payslip_add_line")
    def payslip_add_line(batch_id: str, employee_id: int):
        data = json_body()
        payslip = service.add_line(
            batch_id=batch_id,
            employee_id=employee_id,
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            amount=data.get("amount"),
            notes=data.get("notes", ""),
        )
        return ok(payslip.to_dict())

    @app.route("/api/payroll/payslips/<batch_id>/<int:employee_id>/lines", methods=["DELETE"], endpoint="payslip_remove_line")
    def payslip_remove_line(batch_id: str, employee_id: int):
        data = json_body()
        payslip = service.remove_line(
            batch_id=batch_id,
            employee_id=employee_id,
            kind=data.get("kind", ""),
            name=data.get("name", ""),
        )
        return ok(payslip.to_dict())

    @app.route("/api/payroll/payslips/<batch_id>/<int:employee_id>/send", methods=["POST"], endpoint="payslip_send")
    def payslip_send(batch_id: str, employee_id: int):
        return ok(service.send(batch_id=batch_id, employee_id=employee_id).to_dict())

    @app.route("/api/payroll/payslips/<batch_id>/<int:employee_id>/accept", methods=["POST"], endpoint="payslip_accept")
    def payslip_accept(batch_id: str, employee_id: int):
        return ok(service.accept(batch_id=batch_id, employee_id=employee_id).to_dict())

    @app.route("/api/payroll/payslips/<batch_id>/<int:employee_id>/revision", methods=["POST"], endpoint="payslip_revision")
    def payslip_revision(batch_id: str, employee_id: int):
        data = json_body()
        payslip = service.request_revision(batch_id=batch_id, employee_id=employee_id, reason=data.get("reason", ""))
        return ok(payslip.to_dict())

    @app.route("/api/payroll/payslips/<batch_id>/<int:employee_id>/pay", methods=["POST"], endpoint="payslip_pay")
    def payslip_pay(batch_id: str, employee_id: int):
        data = json_body()
        payslip = service.mark_paid(
            batch_id=batch_id,
            employee_id=employee_id,
            paid_by=data.get("paid_by", ""),
            account_id=data.get("account_id", ""),
        )
        return ok(payslip.to_dict())
