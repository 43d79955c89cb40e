from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..common.money import optional_decimal
from ..core.enums import CompensationPlan, EmploymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, full_name, plan, salary_monthly, salary_daily, start_date, end_date, status"


def _to_employee(row: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        full_name=row["full_name"],
        plan=CompensationPlan(row["plan"]),
        salary_monthly=optional_decimal(row.get("salary_monthly")),
        salary_daily=optional_decimal(row.get("salary_daily")),
        start_date=row.get("start_date"),
        end_date=row.get("end_date"),
        status=EmploymentStatus(row.get("status") or EmploymentStatus.ACTIVE.value),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s",
                (int(employee_id),),
            )
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY employee_id ASC")
            return [_to_employee(r) for r in fetchall(cur)]
