from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, employee_id, leave_type, start_date, end_date, day_count, status,
    fiscal_year, reason, created_at, decided_by, decided_at
"""


def _to_leave(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        day_count=int(r["day_count"]),
        status=LeaveStatus(r["status"]),
        fiscal_year=int(r["fiscal_year"]),
        reason=r.get("reason") or "",
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        day_count: int,
        fiscal_year: int,
        reason: str,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests
                    (employee_id, leave_type, start_date, end_date, day_count, status, fiscal_year, reason, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    int(employee_id),
                    leave_type.value,
                    start_date,
                    end_date,
                    int(day_count),
                    LeaveStatus.SUBMITTED.value,
                    int(fiscal_year),
                    reason,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def set_status(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: str,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=%s
                WHERE request_id=%s
                """,
                (status.value, decided_by, decided_at, int(request_id)),
            )
            return cur.rowcount > 0

    def list_for_employee(
        self,
        *,
        employee_id: int,
        fiscal_year: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if fiscal_year is not None:
            clauses.append("fiscal_year=%s")
            params.append(int(fiscal_year))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {where} ORDER BY start_date ASC, request_id ASC",
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_approved_overlapping(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE employee_id=%s AND status=%s AND start_date <= %s AND end_date >= %s
                ORDER BY start_date ASC, request_id ASC
                """,
                (int(employee_id), LeaveStatus.APPROVED.value, end_date, start_date),
            )
            return [_to_leave(r) for r in fetchall(cur)]
