from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Sequence

from ..common.money import ZERO, clamp, money
from ..core.enums import ComputationBasis, RuleKind
from ..policy.model import PayrollPolicy
from .model import AppliedRule, AttendanceSummary, Earnings, PayrollRule, RateResolution

_HUNDRED = Decimal(100)
_EARNING_KINDS = {RuleKind.ALLOWANCE, RuleKind.BONUS, RuleKind.ADDITIONAL}

# Rule categories with a line of their own on the payslip.
MANDATORY_BENEFIT_CATEGORY = "mandatory_benefit"
LEAVE_BENEFIT_CATEGORY = "leave_benefit"


def overtime_pay(overtime_hours: Decimal, hourly_rate: Decimal, policy: PayrollPolicy) -> Decimal:
    """First ``overtime_tier_cap_hours`` at rate 1, the remainder at rate 2."""
    if overtime_hours <= 0:
        return ZERO
    first = min(overtime_hours, policy.overtime_tier_cap_hours)
    second = max(overtime_hours - policy.overtime_tier_cap_hours, ZERO)
    return first * hourly_rate * policy.overtime_rate1 + second * hourly_rate * policy.overtime_rate2


def rule_amount(rule: PayrollRule, *, gross: Decimal, basic: Decimal) -> Decimal:
    """Fixed amount, or percentage of the rule's basis, clamped to the rule's min/max."""
    if rule.is_percentage:
        base = basic if rule.computation_basis == ComputationBasis.BASIC else gross
        amount = base * rule.amount / _HUNDRED
    else:
        amount = rule.amount
    return money(clamp(amount, rule.min_amount, rule.max_amount))


def apply_rules(
    rules: Sequence[PayrollRule], kinds: set[RuleKind], *, gross: Decimal, basic: Decimal
) -> list[AppliedRule]:
    return [
        AppliedRule(
            rule_id=r.rule_id,
            name=r.name,
            kind=r.kind,
            category=r.category,
            amount=rule_amount(r, gross=gross, basic=basic),
            rate=r.amount if r.is_percentage else None,
        )
        for r in rules
        if r.is_active and r.kind in kinds
    ]


def earning_bucket(rule: AppliedRule) -> str:
    """Earnings field an applied rule adds to. Category wins over kind."""
    category = (rule.category or "").lower()
    if category == MANDATORY_BENEFIT_CATEGORY:
        return "thirteenth_month_pay"
    if category == LEAVE_BENEFIT_CATEGORY:
        return "service_incentive_leave"
    if category == "allowance" or rule.kind == RuleKind.ALLOWANCE:
        return "allowances"
    if category == "bonus" or rule.kind == RuleKind.BONUS:
        return "bonuses"
    return "other_earnings"


def compute_earnings(
    summary: AttendanceSummary,
    rate: RateResolution,
    rules: Sequence[PayrollRule],
    policy: PayrollPolicy,
) -> Earnings:
    hourly = rate.hourly_rate

    regular = money(max((summary.hours_worked - summary.overtime_hours - summary.holiday_hours) * hourly, ZERO))
    overtime = money(overtime_pay(summary.overtime_hours, hourly, policy))
    holiday = money(
        sum(
            (h * hourly * (policy.holiday_multiplier(t) - 1) for t, h in summary.holiday_hours_by_type.items()),
            ZERO,
        )
    )

    pre_rule_gross = regular + overtime + holiday
    basic = rate.daily_rate * summary.days_worked
    applied = apply_rules(rules, _EARNING_KINDS, gross=pre_rule_gross, basic=basic)

    buckets: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for a in applied:
        buckets[earning_bucket(a)] += a.amount

    return Earnings(
        regular_pay=regular,
        overtime_pay=overtime,
        holiday_pay=holiday,
        applied_rules=tuple(applied),
        **buckets,
    )
