from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .policy.mysql_policy_repository import MySQLPolicyRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    attendance_repo: MySQLAttendanceRepository
    holidays_repo: MySQLHolidayRepository
    leaves_repo: MySQLLeaveRepository
    policy_repo: MySQLPolicyRepository
    payroll_repo: MySQLPayrollRepository

    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    policy_repo = MySQLPolicyRepository(conn)
    payroll_repo = MySQLPayrollRepository(conn)

    attendance_service = AttendanceService(attendance_repo, employees_repo, holidays_repo, leaves_repo, policy_repo)
    leave_service = LeaveService(leaves_repo, employees_repo, policy_repo)
    payroll_service = PayrollService(
        payroll_repo,
        employees_repo,
        attendance_repo,
        holidays_repo,
        leaves_repo,
        policy_repo,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        holidays_repo=holidays_repo,
        leaves_repo=leaves_repo,
        policy_repo=policy_repo,
        payroll_repo=payroll_repo,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
    )
