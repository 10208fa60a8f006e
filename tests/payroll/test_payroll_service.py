from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.attendance.model import AttendanceRecord
from src.payroll_system.payroll_system.core.enums import ApprovalStatus, HolidayType, PayrollStatus, RuleKind
from src.payroll_system.payroll_system.core.exceptions import ValidationError
from src.payroll_system.payroll_system.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.payroll_system.payroll_system.payroll.model import PayrollRule
from src.payroll_system.payroll_system.payroll.service import PayrollService
from src.payroll_system.payroll_system.work_calendar.model import Holiday

from tests.fakes import InMemoryAttendance, InMemoryPayroll

START = date(2025, 10, 13)
END = date(2025, 10, 17)


def _week(employee_id: int):
    return [
        AttendanceRecord(
            employee_id=employee_id,
            business_day=START + timedelta(days=i),
            hours_worked=8.0,
            total_sessions=2,
            approval_status=ApprovalStatus.APPROVED,
        )
        for i in range(5)
    ]


@pytest.fixture
def payroll_repo():
    return InMemoryPayroll(
        rules=[
            PayrollRule(rule_id=1, name="Base", kind=RuleKind.BASE, amount=Decimal("800"), applies_to_all=True),
            PayrollRule(rule_id=2, name="Salary loan", kind=RuleKind.DEDUCTION, amount=Decimal("300"), category="loan"),
        ],
        assignments={1: {2}},
    )


@pytest.fixture
def service(employees, work_calendar, payroll_policy, payroll_repo):
    attendance = InMemoryAttendance(_week(1))
    return PayrollService(attendance, employees, payroll_repo, work_calendar, payroll_policy)


def test_compute_payroll_does_not_persist(service, payroll_repo):
    c = service.compute_payroll(1, START, END)

    assert c.regular_pay == Decimal("4000.00")
    assert c.loan_deductions == Decimal("300.00")
    assert c.net_pay == Decimal("3700.00")
    assert payroll_repo.results == {}


def test_compute_for_unknown_employee_is_zero(service):
    c = service.compute_payroll(99, START, END)
    assert c.net_pay == 0
    assert c.diagnostics


def test_inverted_period_is_rejected(service):
    with pytest.raises(ValidationError):
        service.compute_payroll(1, END, START)


def test_generate_upserts_one_result_per_employee_period(service, payroll_repo):
    first = service.generate_for_period(START, END)

    assert (first.processed, first.created, first.updated, first.failed) == (2, 2, 0, 0)
    assert len(payroll_repo.results) == 2
    assert payroll_repo.get_result(2, START, END).computation.net_pay == 0

    second = service.generate_for_period(START, END)

    assert (second.processed, second.created, second.updated) == (2, 0, 2)
    assert len(payroll_repo.results) == 2
    assert len(payroll_repo.summary_rows) == 4


def test_regeneration_keeps_reviewer_status(service, payroll_repo):
    service.generate_for_period(START, END, employee_ids=[1])
    key = (1, START, END)
    payroll_repo.results[key] = replace(payroll_repo.results[key], status=PayrollStatus.APPROVED)

    service.generate_for_period(START, END, employee_ids=[1])

    assert payroll_repo.results[key].status == PayrollStatus.APPROVED


def test_unknown_ids_are_skipped(service, payroll_repo):
    summary = service.generate_for_period(START, END, employee_ids=[1, 42])
    assert summary.processed == 1
    assert list(payroll_repo.results) == [(1, START, END)]


def test_negative_net_pay_is_reported(service, payroll_repo):
    payroll_repo.rules[1] = replace(payroll_repo.rules[1], amount=Decimal("9000"))

    summary = service.generate_for_period(START, END, employee_ids=[1])

    assert summary.negative_net_pay == [1]
    assert payroll_repo.get_result(1, START, END).computation.net_pay < 0


def test_holidays_come_from_the_work_calendar(service, calendar_repo):
    calendar_repo.holidays.append(Holiday(date(2025, 10, 15), "Foundation Day", HolidayType.SPECIAL))

    c = service.compute_payroll(1, START, END)

    assert c.holiday_hours == Decimal("8.00")
    assert c.holiday_pay == Decimal("240.00")


def test_results_for_employee(service):
    service.generate_for_period(START, END)
    assert [r.computation.employee_id for r in service.results_for_employee(1)] == [1]


class _RecordingCalculator(StandardPayrollCalculator):
    def __init__(self):
        self.seen = []

    def compute(self, inputs, policy):
        self.seen.append(inputs)
        return super().compute(inputs, policy)


def test_working_day_counts_come_from_the_work_calendar(
    employees, work_calendar, calendar_repo, payroll_policy, payroll_repo
):
    calendar_repo.holidays.append(Holiday(date(2025, 10, 15), "Foundation Day", HolidayType.SPECIAL))
    calc = _RecordingCalculator()
    service = PayrollService(
        InMemoryAttendance(_week(1)), employees, payroll_repo, work_calendar, payroll_policy, calculator=calc
    )

    service.compute_payroll(1, START, END)
    service.generate_for_period(START, END, employee_ids=[1])

    # 2025 has 261 weekdays; the holiday falls on a Wednesday
    assert [(i.period_working_days, i.year_working_days) for i in calc.seen] == [(4, 260), (4, 260)]
