from __future__ import annotations

import pytest

from src.payroll_system.payroll_system.attendance.importer import AttendanceImporter
from src.payroll_system.payroll_system.attendance.service import AttendanceService
from src.payroll_system.payroll_system.employees.model import Employee
from src.payroll_system.payroll_system.policy.model import AttendancePolicy, PayrollPolicy
from src.payroll_system.payroll_system.work_calendar.service import WorkCalendarService
from tests.fakes import (
    TZ,
    InMemoryAttendance,
    InMemoryBatches,
    InMemoryCalendar,
    InMemoryEmployees,
    InMemoryPunches,
)


@pytest.fixture
def policy() -> AttendancePolicy:
    return AttendancePolicy(reference_timezone=TZ)


@pytest.fixture
def payroll_policy() -> PayrollPolicy:
    return PayrollPolicy()


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        [
            Employee(employee_id=1, external_id="1001", first_name="Maria", last_name="Santos", department="Registrar"),
            Employee(employee_id=2, external_id="1002", first_name="Jose", last_name="Reyes", department="Finance"),
        ]
    )


@pytest.fixture
def calendar_repo() -> InMemoryCalendar:
    return InMemoryCalendar()


@pytest.fixture
def work_calendar(calendar_repo) -> WorkCalendarService:
    return WorkCalendarService(calendar_repo)


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def punches_repo() -> InMemoryPunches:
    return InMemoryPunches()


@pytest.fixture
def batches_repo() -> InMemoryBatches:
    return InMemoryBatches()


@pytest.fixture
def attendance_service(attendance_repo, punches_repo, employees, work_calendar, policy) -> AttendanceService:
    return AttendanceService(attendance_repo, punches_repo, employees, work_calendar, policy)


@pytest.fixture
def importer(attendance_repo, punches_repo, batches_repo, employees, work_calendar, policy) -> AttendanceImporter:
    return AttendanceImporter(attendance_repo, punches_repo, batches_repo, employees, work_calendar, policy)
