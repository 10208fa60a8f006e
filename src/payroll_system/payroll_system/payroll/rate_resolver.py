from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..common.money import ZERO
from ..core.enums import RuleKind
from ..employees.model import Employee
from ..policy.model import PayrollPolicy
from .model import PayrollRole, PayrollRule, RateResolution


def applicable_rules(rules: Iterable[PayrollRule], assigned_rule_ids: Iterable[int]) -> list[PayrollRule]:
    """Active global rules plus active assigned ones, each rule at most once."""
    assigned = set(assigned_rule_ids)
    seen: set[int] = set()
    out: list[PayrollRule] = []
    for rule in rules:
        if not rule.is_active or rule.rule_id in seen:
            continue
        if rule.applies_to_all or rule.rule_id in assigned:
            seen.add(rule.rule_id)
            out.append(rule)
    return out


def _role_for(employee: Employee, roles: Iterable[PayrollRole]) -> Optional[PayrollRole]:
    scoped: list[PayrollRole] = []
    for role in roles:
        if not role.is_active:
            continue
        if role.employee_id is not None:
            if role.employee_id == employee.employee_id:
                return role
            continue
        if role.department and role.department != employee.department:
            continue
        if role.position and role.position != employee.position:
            continue
        scoped.append(role)
    # Most specific scope first.
    scoped.sort(key=lambda r: (r.department is None, r.position is None))
    return scoped[0] if scoped else None


def resolve_rate(
    employee: Employee,
    roles: Sequence[PayrollRole],
    rules: Sequence[PayrollRule],
    assigned_rule_ids: Iterable[int],
    policy: PayrollPolicy,
) -> RateResolution:
    """Daily rate: role override, then fixed base rules, then zero."""
    role = _role_for(employee, roles)
    if role is not None:
        return _resolution(role.daily_rate, "role", policy)

    assigned = set(assigned_rule_ids)
    base = [r for r in rules if r.is_active and r.kind == RuleKind.BASE and not r.is_percentage]
    own = [r for r in base if r.rule_id in assigned]
    chosen = own or [r for r in base if r.applies_to_all]
    if chosen:
        return _resolution(sum((r.amount for r in chosen), ZERO), "assigned_rules" if own else "global_rules", policy)

    return RateResolution(
        daily_rate=ZERO,
        hourly_rate=ZERO,
        source="none",
        diagnostic=f"No daily rate configured for employee {employee.employee_id}",
    )


def _resolution(daily_rate, source: str, policy: PayrollPolicy) -> RateResolution:
    return RateResolution(
        daily_rate=daily_rate,
        hourly_rate=daily_rate / policy.standard_daily_hours,
        source=source,
    )
