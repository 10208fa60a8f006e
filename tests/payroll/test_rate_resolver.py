from decimal import Decimal

from src.payroll_system.payroll_system.core.enums import RuleKind
from src.payroll_system.payroll_system.employees.model import Employee
from src.payroll_system.payroll_system.payroll.model import PayrollRole, PayrollRule
from src.payroll_system.payroll_system.payroll.rate_resolver import applicable_rules, resolve_rate

EMP = Employee(employee_id=1, external_id="1001", first_name="Maria", last_name="Santos", department="Registrar", position="Clerk")

GLOBAL_BASE = PayrollRule(rule_id=1, name="Base", kind=RuleKind.BASE, amount=Decimal("800"), applies_to_all=True)
OWN_BASE = PayrollRule(rule_id=2, name="Senior base", kind=RuleKind.BASE, amount=Decimal("1000"))
RICE = PayrollRule(rule_id=3, name="Rice", kind=RuleKind.ALLOWANCE, amount=Decimal("500"), applies_to_all=True)
INACTIVE = PayrollRule(rule_id=4, name="Old", kind=RuleKind.BONUS, amount=Decimal("1"), applies_to_all=True, is_active=False)


def test_employee_role_wins(payroll_policy):
    roles = [
        PayrollRole(role_id=1, daily_rate=Decimal("700"), department="Registrar"),
        PayrollRole(role_id=2, daily_rate=Decimal("950"), employee_id=1),
    ]
    rate = resolve_rate(EMP, roles, [GLOBAL_BASE], set(), payroll_policy)

    assert rate.daily_rate == Decimal("950")
    assert rate.hourly_rate == Decimal("118.75")
    assert rate.source == "role"


def test_most_specific_scoped_role(payroll_policy):
    roles = [
        PayrollRole(role_id=1, daily_rate=Decimal("700"), department="Registrar"),
        PayrollRole(role_id=2, daily_rate=Decimal("750"), department="Registrar", position="Clerk"),
        PayrollRole(role_id=3, daily_rate=Decimal("999"), department="Finance"),
    ]
    assert resolve_rate(EMP, roles, [], set(), payroll_policy).daily_rate == Decimal("750")


def test_assigned_base_rules_take_precedence_over_global(payroll_policy):
    assert resolve_rate(EMP, [], [GLOBAL_BASE, OWN_BASE], {2}, payroll_policy).daily_rate == Decimal("1000")
    assert resolve_rate(EMP, [], [GLOBAL_BASE, OWN_BASE], set(), payroll_policy).daily_rate == Decimal("800")


def test_no_rate_gives_zero_with_diagnostic(payroll_policy):
    rate = resolve_rate(EMP, [], [RICE], set(), payroll_policy)
    assert rate.daily_rate == 0 and rate.hourly_rate == 0
    assert "No daily rate" in rate.diagnostic


def test_rule_assigned_and_global_is_counted_once():
    rules = applicable_rules([RICE, OWN_BASE, RICE, INACTIVE], {3, 2})
    assert [r.rule_id for r in rules] == [3, 2]
