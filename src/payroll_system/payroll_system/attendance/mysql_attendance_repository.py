from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AdjustmentType, ScanDirection
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceAdjustment, AttendanceEvent
from .repository import AttendanceRepository


def _to_adjustment(r: Dict[str, Any]) -> AttendanceAdjustment:
    return AttendanceAdjustment(
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        adjustment_type=AdjustmentType(r["adjustment_type"]),
        adjusted_in=r.get("adjusted_in"),
        adjusted_out=r.get("adjusted_out"),
        note=r.get("note") or "",
        created_by=r.get("created_by") or "",
        created_at=r.get("created_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_events(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceEvent]:
        start = datetime.combine(start_date, time.min)
        end = datetime.combine(end_date + timedelta(days=1), time.min)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, employee_id, direction, scanned_at
                FROM attendance_events
                WHERE employee_id=%s AND scanned_at >= %s AND scanned_at < %s
                ORDER BY scanned_at ASC
                """,
                (int(employee_id), start, end),
            )
            return [
                AttendanceEvent(
                    event_id=int(r["event_id"]),
                    employee_id=int(r["employee_id"]),
                    direction=ScanDirection(r["direction"]),
                    timestamp=r.get("scanned_at"),
                )
                for r in fetchall(cur)
            ]

    def list_adjustments(
        self, *, employee_id: int, start_date: date, end_date: date
    ) -> Sequence[AttendanceAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, work_date, adjustment_type, adjusted_in, adjusted_out, note, created_by, created_at
                FROM attendance_adjustments
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [_to_adjustment(r) for r in fetchall(cur)]

    def get_adjustment(self, *, employee_id: int, work_date: date) -> Optional[AttendanceAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, work_date, adjustment_type, adjusted_in, adjusted_out, note, created_by, created_at
                FROM attendance_adjustments
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_adjustment(r) if r else None

    def upsert_adjustment(self, adjustment: AttendanceAdjustment) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_adjustments
                    (employee_id, work_date, adjustment_type, adjusted_in, adjusted_out, note, created_by, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    adjustment_type=VALUES(adjustment_type),
                    adjusted_in=VALUES(adjusted_in),
                    adjusted_out=VALUES(adjusted_out),
                    note=VALUES(note),
                    created_by=VALUES(created_by),
                    created_at=VALUES(created_at)
                """,
                (
                    adjustment.employee_id,
                    adjustment.work_date,
                    adjustment.adjustment_type.value,
                    adjustment.adjusted_in,
                    adjustment.adjusted_out,
                    adjustment.note,
                    adjustment.created_by,
                    adjustment.created_at,
                ),
            )
