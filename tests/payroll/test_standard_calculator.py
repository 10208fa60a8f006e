from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

from src.payroll_system.payroll_system.attendance.model import AttendanceRecord
from src.payroll_system.payroll_system.core.enums import ApprovalStatus, RuleKind
from src.payroll_system.payroll_system.employees.model import Employee
from src.payroll_system.payroll_system.payroll.calculator.base import PayrollInputs
from src.payroll_system.payroll_system.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.payroll_system.payroll_system.payroll.model import PayrollRule
from src.payroll_system.payroll_system.policy.model import ContributionScheme, PayrollPolicy

START = date(2025, 10, 1)
END = date(2025, 10, 15)
EMP = Employee(employee_id=1, external_id="1001", first_name="Maria", last_name="Santos")

POLICY = PayrollPolicy(
    gsis=ContributionScheme(name="gsis", employee_rate=Decimal("9")),
    philhealth=ContributionScheme(
        name="philhealth",
        employee_rate=Decimal("2.5"),
        min_salary=Decimal("10000"),
        max_salary=Decimal("100000"),
        min_contribution=Decimal("250"),
        max_contribution=Decimal("2500"),
    ),
    pagibig=ContributionScheme(
        name="pagibig", employee_rate=Decimal("2"), max_salary=Decimal("5000"), max_contribution=Decimal("100")
    ),
)

RULES = (
    PayrollRule(rule_id=1, name="Base", kind=RuleKind.BASE, amount=Decimal("800"), applies_to_all=True),
    PayrollRule(rule_id=2, name="Rice", kind=RuleKind.ALLOWANCE, amount=Decimal("500"), applies_to_all=True),
    PayrollRule(rule_id=3, name="Salary loan", kind=RuleKind.DEDUCTION, amount=Decimal("300"), category="Loan"),
)


def _records(n: int, hours: float = 8.0):
    return tuple(
        AttendanceRecord(
            employee_id=1,
            business_day=START + timedelta(days=i),
            hours_worked=hours,
            total_sessions=2,
            approval_status=ApprovalStatus.APPROVED,
        )
        for i in range(n)
    )


def _inputs(**kw) -> PayrollInputs:
    base = dict(
        employee_id=1,
        pay_period_start=START,
        pay_period_end=END,
        employee=EMP,
        records=_records(10),
        rules=RULES,
        assigned_rule_ids=frozenset({3}),
    )
    base.update(kw)
    return PayrollInputs(**base)


def test_full_computation():
    c = StandardPayrollCalculator().compute(_inputs(), POLICY)

    assert c.daily_rate == Decimal("800.00")
    assert c.hourly_rate == Decimal("100.00")
    assert c.days_worked == Decimal("10")
    assert c.regular_pay == Decimal("8000.00")
    assert c.allowances == Decimal("500.00")
    assert c.gross_pay == c.total_earnings == Decimal("8500.00")
    assert c.gsis_contribution == Decimal("720.00")
    assert c.philhealth_contribution == Decimal("250.00")
    assert c.pagibig_contribution == Decimal("100.00")
    assert c.taxable_income == Decimal("7430.00")
    assert c.withholding_tax == Decimal("0")
    assert c.loan_deductions == Decimal("300.00")
    assert c.total_deductions == Decimal("1370.00")
    assert c.net_pay == Decimal("7130.00")
    assert {r.rule_id for r in c.applied_rules} == {2, 3}


def test_net_is_exactly_gross_minus_deductions():
    calc = StandardPayrollCalculator()
    for hours in (7.33, 8.0, 9.17, 10.45, 12.07):
        c = calc.compute(_inputs(records=_records(11, hours)), POLICY)

        assert c.net_pay == c.gross_pay - c.total_deductions
        assert c.total_deductions == (
            c.gsis_contribution
            + c.philhealth_contribution
            + c.pagibig_contribution
            + c.withholding_tax
            + c.late_deductions
            + c.undertime_deductions
            + c.loan_deductions
            + c.other_deductions
        )
        for name, value in c.amounts().items():
            if name.endswith(("_pay", "_deductions", "_contribution", "_tax", "allowances", "bonuses")):
                assert value == value.quantize(Decimal("0.01")), name


def test_unknown_employee_gives_zero_computation():
    c = StandardPayrollCalculator().compute(_inputs(employee=None), POLICY)
    assert c.net_pay == 0
    assert c.diagnostics == ("Employee 1 not found",)


def test_no_attendance_is_zero_not_error():
    c = StandardPayrollCalculator().compute(_inputs(records=(), assigned_rule_ids=frozenset()), POLICY)

    assert c.regular_pay == 0
    assert c.gsis_contribution == 0
    assert "No attendance in pay period" in c.diagnostics


def test_negative_net_pay_is_surfaced_not_clamped():
    big_loan = replace(RULES[2], amount=Decimal("20000"))
    c = StandardPayrollCalculator().compute(_inputs(rules=RULES[:2] + (big_loan,)), POLICY)

    assert c.net_pay < 0
    assert c.net_pay == c.gross_pay - c.total_deductions
    assert any("Net pay is negative" in d for d in c.diagnostics)


def test_undertime_is_deducted_at_the_hourly_rate():
    c = StandardPayrollCalculator().compute(_inputs(records=_records(10, 6.0)), POLICY)

    assert c.undertime_hours == Decimal("20.00")
    assert c.undertime_deductions == Decimal("2000.00")
    assert c.net_pay == c.gross_pay - c.total_deductions


def test_thirteenth_month_is_paid_but_not_taxed():
    thirteenth = PayrollRule(
        rule_id=4,
        name="13th month pay",
        kind=RuleKind.BONUS,
        category="mandatory_benefit",
        amount=Decimal("1000"),
        applies_to_all=True,
    )
    c = StandardPayrollCalculator().compute(_inputs(rules=RULES + (thirteenth,)), POLICY)

    assert c.thirteenth_month_pay == Decimal("1000.00")
    assert c.bonuses == 0
    assert c.gross_pay == Decimal("9500.00")
    assert c.taxable_income == Decimal("7430.00")


def test_withholding_follows_the_period_share_of_working_days():
    rules = (replace(RULES[0], amount=Decimal("4000")),) + RULES[1:]
    calc = StandardPayrollCalculator()

    semi_monthly = calc.compute(_inputs(rules=rules, period_working_days=11, year_working_days=264), POLICY)
    no_calendar = calc.compute(_inputs(rules=rules), POLICY)

    assert semi_monthly.taxable_income == Decimal("35800.00")
    # 35800 x 24 = 859200 a year: 117300 tax, 11/264 of it this period
    assert semi_monthly.withholding_tax == Decimal("4887.50")
    # Treated as a month: 429600 a year, 28420 tax, a twelfth of it
    assert no_calendar.withholding_tax == Decimal("2368.33")
