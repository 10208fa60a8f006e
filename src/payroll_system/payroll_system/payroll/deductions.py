"""Statutory contributions, withholding tax and rule-based deductions.

Contributions are keyed by ``daily_rate * days_worked``. Withholding tax runs
on taxable income: gross less the three contributions and the tax-exempt
benefits (13th-month pay, service incentive leave). By default that income is
annualized over the year's working days before the brackets apply.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..common.money import ZERO, clamp, money
from ..core.enums import DeductionBasis, RuleKind
from ..policy.model import ContributionScheme, PayrollPolicy, TaxBracket
from .earnings import apply_rules
from .model import AttendanceSummary, Deductions, PayrollRule, RateResolution

_HUNDRED = Decimal(100)
_SIXTY = Decimal(60)
_TWELVE = Decimal(12)
LOAN_CATEGORY = "loan"


def _positive(value: Decimal) -> Optional[Decimal]:
    return value if value > 0 else None


def contribution(scheme: ContributionScheme, salary_base: Decimal) -> Decimal:
    if salary_base <= 0:
        return ZERO

    for bracket in scheme.brackets:
        if bracket.salary_min <= salary_base <= bracket.salary_max:
            amount = salary_base * bracket.employee_rate / _HUNDRED
            low = bracket.min_contribution if bracket.min_contribution is not None else _positive(scheme.min_contribution)
            high = bracket.max_contribution if bracket.max_contribution is not None else _positive(scheme.max_contribution)
            return money(clamp(amount, low, high))

    if scheme.min_salary > 0 and salary_base < scheme.min_salary and scheme.min_contribution > 0:
        return money(scheme.min_contribution)

    base = min(salary_base, scheme.max_salary) if scheme.max_salary > 0 else salary_base
    amount = base * scheme.employee_rate / _HUNDRED
    return money(clamp(amount, _positive(scheme.min_contribution), _positive(scheme.max_contribution)))


def _bracket_tax(bracket: TaxBracket, upto: Decimal) -> Decimal:
    return max(upto - bracket.min, ZERO) * bracket.rate / _HUNDRED


def withholding_tax(taxable_income: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Progressive tax: the bracket's fixed amount (or the lower brackets' tax) plus excess times rate."""
    if taxable_income <= 0 or not brackets:
        return ZERO

    lower_tax = ZERO
    for bracket in brackets:
        top = bracket.max
        if taxable_income > bracket.min and (top is None or taxable_income <= top):
            base = bracket.fixed_amount if bracket.fixed_amount is not None else lower_tax
            return money(base + _bracket_tax(bracket, taxable_income))
        if top is not None:
            lower_tax += _bracket_tax(bracket, top)
    return ZERO


def period_withholding_tax(
    taxable_income: Decimal,
    policy: PayrollPolicy,
    *,
    period_working_days: int = 0,
    year_working_days: int = 0,
) -> Decimal:
    """Withholding for one pay period.

    With annualization on, the period income is scaled up by
    ``year_working_days / period_working_days``, taxed on the annual table and
    the annual tax prorated back the same way. Without calendar data the period
    is treated as one month.
    """
    if not policy.withholding_enabled or taxable_income <= 0:
        return ZERO
    if not policy.annualize_withholding:
        return withholding_tax(taxable_income, policy.tax_brackets)

    if period_working_days > 0 and year_working_days > 0:
        period_days, year_days = Decimal(period_working_days), Decimal(year_working_days)
        annual = taxable_income * year_days / period_days
        return money(withholding_tax(annual, policy.tax_brackets) * period_days / year_days)

    return money(withholding_tax(taxable_income * _TWELVE, policy.tax_brackets) / _TWELVE)


def time_deduction(
    basis: DeductionBasis,
    amount: Decimal,
    *,
    hours_lost: Decimal,
    instances: int,
    hourly_rate: Decimal,
    daily_rate: Decimal,
    standard_daily_hours: Decimal,
) -> Decimal:
    """Late/undertime penalty. ``amount`` is a multiplier, except for ``fixed`` where it is per instance."""
    if hours_lost <= 0 or amount <= 0:
        return ZERO
    if basis == DeductionBasis.FIXED:
        value = Decimal(instances) * amount
    elif basis == DeductionBasis.DAILY:
        value = hours_lost / standard_daily_hours * daily_rate * amount
    elif basis == DeductionBasis.PER_MINUTE:
        value = hours_lost * _SIXTY * (hourly_rate / _SIXTY) * amount
    else:
        value = hours_lost * hourly_rate * amount
    return money(value)


def compute_deductions(
    summary: AttendanceSummary,
    rate: RateResolution,
    gross_pay: Decimal,
    rules: Sequence[PayrollRule],
    policy: PayrollPolicy,
    *,
    tax_exempt: Decimal = ZERO,
    period_working_days: int = 0,
    year_working_days: int = 0,
) -> Deductions:
    salary_base = rate.daily_rate * summary.days_worked

    gsis = contribution(policy.gsis, salary_base)
    philhealth = contribution(policy.philhealth, salary_base)
    pagibig = contribution(policy.pagibig, salary_base)

    taxable = gross_pay - gsis - philhealth - pagibig - tax_exempt
    tax = period_withholding_tax(
        taxable,
        policy,
        period_working_days=period_working_days,
        year_working_days=year_working_days,
    )

    common = dict(
        hourly_rate=rate.hourly_rate,
        daily_rate=rate.daily_rate,
        standard_daily_hours=policy.standard_daily_hours,
    )
    late = time_deduction(
        policy.late_deduction_basis,
        policy.late_deduction_amount,
        hours_lost=summary.late_hours,
        instances=summary.late_instances,
        **common,
    )
    undertime = time_deduction(
        policy.undertime_deduction_basis,
        policy.undertime_deduction_amount,
        hours_lost=summary.undertime_hours,
        instances=summary.undertime_instances,
        **common,
    )

    applied = apply_rules(rules, {RuleKind.DEDUCTION}, gross=gross_pay, basic=salary_base)
    loans = sum((a.amount for a in applied if (a.category or "").lower() == LOAN_CATEGORY), ZERO)
    others = sum((a.amount for a in applied if (a.category or "").lower() != LOAN_CATEGORY), ZERO)

    return Deductions(
        gsis_contribution=gsis,
        philhealth_contribution=philhealth,
        pagibig_contribution=pagibig,
        taxable_income=taxable,
        withholding_tax=tax,
        late_deductions=late,
        undertime_deductions=undertime,
        loan_deductions=loans,
        other_deductions=others,
        applied_rules=tuple(applied),
    )
