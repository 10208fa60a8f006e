from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .attendance.factory import ApprovalStrategyFactory
from .attendance.importer import AttendanceImporter
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_import_batch_repository import MySQLImportBatchRepository
from .attendance.mysql_punch_repository import MySQLPunchRepository
from .attendance.service import AttendanceService
from .database.bootstrap import as_db_config
from .database.connection import DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .policy.loader import load_policy
from .policy.model import PolicyConfig
from .work_calendar.mysql_calendar_repository import MySQLCalendarRepository
from .work_calendar.service import WorkCalendarService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    policy: PolicyConfig

    employees_repo: MySQLEmployeeRepository
    calendar_repo: MySQLCalendarRepository
    attendance_repo: MySQLAttendanceRepository
    punches_repo: MySQLPunchRepository
    batches_repo: MySQLImportBatchRepository
    payroll_repo: MySQLPayrollRepository

    work_calendar: WorkCalendarService
    attendance_service: AttendanceService
    attendance_importer: AttendanceImporter
    payroll_service: PayrollService


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(as_db_config(db_config))
    policy = load_policy(settings)

    employees_repo = MySQLEmployeeRepository(conn)
    calendar_repo = MySQLCalendarRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    punches_repo = MySQLPunchRepository(conn)
    batches_repo = MySQLImportBatchRepository(conn)
    payroll_repo = MySQLPayrollRepository(conn)

    work_calendar = WorkCalendarService(calendar_repo)
    strategy_factory = ApprovalStrategyFactory()
    attendance_service = AttendanceService(
        attendance_repo,
        punches_repo,
        employees_repo,
        work_calendar,
        policy.attendance,
        strategy_factory=strategy_factory,
    )
    attendance_importer = AttendanceImporter(
        attendance_repo,
        punches_repo,
        batches_repo,
        employees_repo,
        work_calendar,
        policy.attendance,
        strategy_factory=strategy_factory,
    )
    payroll_service = PayrollService(attendance_repo, employees_repo, payroll_repo, work_calendar, policy.payroll)

    return Container(
        conn=conn,
        policy=policy,
        employees_repo=employees_repo,
        calendar_repo=calendar_repo,
        attendance_repo=attendance_repo,
        punches_repo=punches_repo,
        batches_repo=batches_repo,
        payroll_repo=payroll_repo,
        work_calendar=work_calendar,
        attendance_service=attendance_service,
        attendance_importer=attendance_importer,
        payroll_service=payroll_service,
    )
