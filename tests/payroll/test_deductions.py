from dataclasses import replace
from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.core.enums import DeductionBasis
from src.payroll_system.payroll_system.payroll.deductions import (
    contribution,
    period_withholding_tax,
    time_deduction,
    withholding_tax,
)
from src.payroll_system.payroll_system.policy.model import (
    ContributionBracket,
    ContributionScheme,
    PayrollPolicy,
    TaxBracket,
)

PHILHEALTH = ContributionScheme(
    name="philhealth",
    employee_rate=Decimal("2.5"),
    min_salary=Decimal("10000"),
    max_salary=Decimal("100000"),
    min_contribution=Decimal("250"),
    max_contribution=Decimal("2500"),
)


@pytest.mark.parametrize(
    "salary, expected",
    [
        ("0", "0"),
        ("8000", "250.00"),
        ("40000", "1000.00"),
        ("200000", "2500.00"),
    ],
)
def test_contribution_floor_rate_and_ceiling(salary, expected):
    assert contribution(PHILHEALTH, Decimal(salary)) == Decimal(expected)


def test_bracket_overrides_flat_rate():
    scheme = ContributionScheme(
        name="gsis",
        employee_rate=Decimal("9"),
        brackets=(ContributionBracket(Decimal("0"), Decimal("10000"), Decimal("1")),),
    )
    assert contribution(scheme, Decimal("5000")) == Decimal("50.00")
    assert contribution(scheme, Decimal("20000")) == Decimal("1800.00")


def test_withholding_tax_brackets():
    brackets = PayrollPolicy().tax_brackets

    assert withholding_tax(Decimal("250000"), brackets) == 0
    assert withholding_tax(Decimal("400000"), brackets) == Decimal("22500.00")
    assert withholding_tax(Decimal("480000"), brackets) == Decimal("38500.00")
    assert withholding_tax(Decimal("2000000"), brackets) == Decimal("402500.00")
    assert withholding_tax(Decimal("-10"), brackets) == 0


def test_withholding_tax_is_progressive():
    brackets = PayrollPolicy().tax_brackets
    incomes = [Decimal(n) for n in range(0, 3_000_001, 10_000)]
    taxes = [withholding_tax(i, brackets) for i in incomes]

    assert taxes == sorted(taxes)
    # Marginal rate never exceeds the top bracket rate.
    for (i1, t1), (i2, t2) in zip(zip(incomes, taxes), zip(incomes[1:], taxes[1:])):
        assert t2 - t1 <= (i2 - i1) * Decimal("0.35") + Decimal("0.01")


def test_time_deduction_bases():
    common = dict(hourly_rate=Decimal("100"), daily_rate=Decimal("800"), standard_daily_hours=Decimal("8"))

    assert time_deduction(DeductionBasis.HOURLY, Decimal("1"), hours_lost=Decimal("1.5"), instances=2, **common) == Decimal("150.00")
    assert time_deduction(DeductionBasis.FIXED, Decimal("50"), hours_lost=Decimal("1.5"), instances=2, **common) == Decimal("100.00")
    assert time_deduction(DeductionBasis.DAILY, Decimal("1"), hours_lost=Decimal("2"), instances=1, **common) == Decimal("200.00")
    assert time_deduction(DeductionBasis.PER_MINUTE, Decimal("1"), hours_lost=Decimal("0.5"), instances=1, **common) == Decimal("50.00")
    assert time_deduction(DeductionBasis.HOURLY, Decimal("0"), hours_lost=Decimal("3"), instances=3, **common) == 0


def test_undertime_is_priced_at_the_hourly_rate_by_default():
    policy = PayrollPolicy()
    common = dict(hourly_rate=Decimal("100"), daily_rate=Decimal("800"), standard_daily_hours=Decimal("8"))

    value = time_deduction(
        policy.undertime_deduction_basis,
        policy.undertime_deduction_amount,
        hours_lost=Decimal("20"),
        instances=10,
        **common,
    )

    assert value == Decimal("2000.00")
    assert policy.late_deduction_amount == 0


def test_withholding_is_annualized_by_working_days():
    policy = PayrollPolicy()

    # 20000 over 11 of 264 working days is 480000 a year: 38500 tax, prorated back.
    semi_monthly = period_withholding_tax(Decimal("20000"), policy, period_working_days=11, year_working_days=264)
    monthly = period_withholding_tax(Decimal("40000"), policy, period_working_days=22, year_working_days=264)

    assert semi_monthly == Decimal("1604.17")
    assert monthly == Decimal("3208.33")


def test_withholding_without_calendar_treats_the_period_as_a_month():
    policy = PayrollPolicy()
    assert period_withholding_tax(Decimal("40000"), policy) == Decimal("3208.33")
    assert period_withholding_tax(Decimal("20000"), policy) == 0


def test_withholding_can_use_a_per_period_table():
    policy = replace(
        PayrollPolicy(),
        annualize_withholding=False,
        tax_brackets=(
            TaxBracket(min=Decimal("0"), max=Decimal("20833"), rate=Decimal("0")),
            TaxBracket(min=Decimal("20833"), max=None, rate=Decimal("20")),
        ),
    )

    assert period_withholding_tax(Decimal("33333"), policy, period_working_days=22, year_working_days=264) == Decimal(
        "2500.00"
    )
    assert period_withholding_tax(Decimal("33333"), replace(policy, withholding_enabled=False)) == 0
