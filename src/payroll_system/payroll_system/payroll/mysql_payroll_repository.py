from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import PayslipStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_column, fetchall, fetchone, load_json_column
from .model import Payslip, PayslipSnapshot, SsoDecision
from .repository import PayrollRepository

_PAYSLIP_COLUMNS = """
    batch_id, employee_id, employee_name, status, snapshot, revision_no, employee_note,
    paid_by, paid_account_id, paid_at, sent_at, updated_at
"""


def _to_payslip(r: Dict[str, Any]) -> Payslip:
    return Payslip(
        batch_id=r["batch_id"],
        employee_id=int(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        status=PayslipStatus(r["status"]),
        snapshot=PayslipSnapshot.from_dict(load_json_column(r["snapshot"])),
        revision_no=int(r.get("revision_no") or 0),
        employee_note=r.get("employee_note"),
        paid_by=r.get("paid_by"),
        paid_account_id=r.get("paid_account_id"),
        paid_at=r.get("paid_at"),
        sent_at=r.get("sent_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_sso_decision(self, *, year: int, month: int) -> Optional[SsoDecision]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT document FROM payroll_sso_locks WHERE year=%s AND month=%s",
                (int(year), int(month)),
            )
            row = fetchone(cur)
        return SsoDecision.from_dict(load_json_column(row["document"])) if row else None

    def create_sso_decision_if_absent(self, *, year: int, month: int, decision: SsoDecision) -> SsoDecision:
        # INSERT IGNORE on the (year, month) primary key: the first writer wins,
        # everyone reads back the winner in the same transaction.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO payroll_sso_locks (year, month, document) VALUES (%s, %s, %s)",
                (int(year), int(month), dump_json_column(decision.to_dict())),
            )
            cur.execute(
                "SELECT document FROM payroll_sso_locks WHERE year=%s AND month=%s",
                (int(year), int(month)),
            )
            row = fetchone(cur)
        return SsoDecision.from_dict(load_json_column(row["document"]))

    def replace_sso_decision(self, *, year: int, month: int, decision: SsoDecision) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_sso_locks (year, month, document) VALUES (%s, %s, %s)
                ON DUPLICATE KEY UPDATE document=VALUES(document)
                """,
                (int(year), int(month), dump_json_column(decision.to_dict())),
            )

    def get_payslip(self, *, batch_id: str, employee_id: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PAYSLIP_COLUMNS} FROM payslips WHERE batch_id=%s AND employee_id=%s",
                (batch_id, int(employee_id)),
            )
            r = fetchone(cur)
            return _to_payslip(r) if r else None

    def list_payslips(self, *, batch_id: str) -> Sequence[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PAYSLIP_COLUMNS} FROM payslips WHERE batch_id=%s ORDER BY employee_id ASC",
                (batch_id,),
            )
            return [_to_payslip(r) for r in fetchall(cur)]

    def save_payslip(self, payslip: Payslip) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payslips
                    (batch_id, employee_id, employee_name, status, snapshot, revision_no, employee_note,
                     paid_by, paid_account_id, paid_at, sent_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    employee_name=VALUES(employee_name),
                    status=VALUES(status),
                    snapshot=VALUES(snapshot),
                    revision_no=VALUES(revision_no),
                    employee_note=VALUES(employee_note),
                    paid_by=VALUES(paid_by),
                    paid_account_id=VALUES(paid_account_id),
                    paid_at=VALUES(paid_at),
                    sent_at=VALUES(sent_at),
                    updated_at=VALUES(updated_at)
                """,
                (
                    payslip.batch_id,
                    int(payslip.employee_id),
                    payslip.employee_name,
                    payslip.status.value,
                    dump_json_column(payslip.snapshot.to_dict()),
                    int(payslip.revision_no),
                    payslip.employee_note,
                    payslip.paid_by,
                    payslip.paid_account_id,
                    payslip.paid_at,
                    payslip.sent_at,
                    payslip.updated_at,
                ),
            )
