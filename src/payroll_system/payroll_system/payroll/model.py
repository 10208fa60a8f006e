from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO
from ..core.enums import ComputationBasis, HolidayType, PayrollStatus, RuleKind


@dataclass(frozen=True)
class PayrollRule:
    """Quy tắc lương: lương cơ bản, phụ cấp, thưởng hoặc khấu trừ.

    ``amount`` is a percentage when ``is_percentage`` is set (e.g. 5 means 5%).
    """

    rule_id: int
    name: str
    kind: RuleKind
    amount: Decimal
    is_percentage: bool = False
    category: Optional[str] = None
    computation_basis: ComputationBasis = ComputationBasis.GROSS
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    applies_to_all: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class PayrollRole:
    """Per-employee (or department/position scoped) daily rate override."""

    role_id: int
    daily_rate: Decimal
    employee_id: Optional[int] = None
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class AppliedRule:
    rule_id: int
    name: str
    kind: RuleKind
    category: Optional[str]
    amount: Decimal
    rate: Optional[Decimal] = None

    def as_dict(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "ruleName": self.name,
            "ruleType": self.kind.value,
            "category": self.category,
            "amount": str(self.amount),
            "rate": str(self.rate) if self.rate is not None else None,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Period attendance, in days and hours, ready for pay computation."""

    days_worked: Decimal = ZERO
    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    undertime_hours: Decimal = ZERO
    late_hours: Decimal = ZERO
    late_minutes: int = 0
    late_instances: int = 0
    undertime_instances: int = 0
    holiday_hours_by_type: dict[HolidayType, Decimal] = field(default_factory=dict)
    records_counted: int = 0

    @property
    def holiday_hours(self) -> Decimal:
        return sum(self.holiday_hours_by_type.values(), ZERO)


@dataclass(frozen=True)
class RateResolution:
    daily_rate: Decimal
    hourly_rate: Decimal
    source: str
    diagnostic: Optional[str] = None


@dataclass(frozen=True)
class Earnings:
    regular_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    holiday_pay: Decimal = ZERO
    allowances: Decimal = ZERO
    bonuses: Decimal = ZERO
    thirteenth_month_pay: Decimal = ZERO
    service_incentive_leave: Decimal = ZERO
    other_earnings: Decimal = ZERO
    applied_rules: tuple[AppliedRule, ...] = ()

    @property
    def total_earnings(self) -> Decimal:
        return (
            self.regular_pay
            + self.overtime_pay
            + self.holiday_pay
            + self.allowances
            + self.bonuses
            + self.thirteenth_month_pay
            + self.service_incentive_leave
            + self.other_earnings
        )

    @property
    def tax_exempt_benefits(self) -> Decimal:
        return self.thirteenth_month_pay + self.service_incentive_leave


@dataclass(frozen=True)
class Deductions:
    gsis_contribution: Decimal = ZERO
    philhealth_contribution: Decimal = ZERO
    pagibig_contribution: Decimal = ZERO
    taxable_income: Decimal = ZERO
    withholding_tax: Decimal = ZERO
    late_deductions: Decimal = ZERO
    undertime_deductions: Decimal = ZERO
    loan_deductions: Decimal = ZERO
    other_deductions: Decimal = ZERO
    applied_rules: tuple[AppliedRule, ...] = ()

    @property
    def total_deductions(self) -> Decimal:
        return (
            self.gsis_contribution
            + self.philhealth_contribution
            + self.pagibig_contribution
            + self.withholding_tax
            + self.late_deductions
            + self.undertime_deductions
            + self.loan_deductions
            + self.other_deductions
        )


_JSON_NAMES = {
    "philhealth_contribution": "philHealthContribution",
}


def _camel(name: str) -> str:
    if name in _JSON_NAMES:
        return _JSON_NAMES[name]
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


@dataclass(frozen=True)
class PayrollComputation:
    """Kết quả tính lương cho một nhân viên trong một kỳ.

    Currency fields are cents-quantized ``Decimal``; hour fields are hours
    rounded to 0.01; ``days_worked`` counts a half-day as 0.5.
    """

    employee_id: int
    pay_period_start: date
    pay_period_end: date
    daily_rate: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    days_worked: Decimal = ZERO
    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    undertime_hours: Decimal = ZERO
    late_hours: Decimal = ZERO
    holiday_hours: Decimal = ZERO
    regular_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    holiday_pay: Decimal = ZERO
    allowances: Decimal = ZERO
    bonuses: Decimal = ZERO
    thirteenth_month_pay: Decimal = ZERO
    service_incentive_leave: Decimal = ZERO
    other_earnings: Decimal = ZERO
    total_earnings: Decimal = ZERO
    gross_pay: Decimal = ZERO
    gsis_contribution: Decimal = ZERO
    philhealth_contribution: Decimal = ZERO
    pagibig_contribution: Decimal = ZERO
    taxable_income: Decimal = ZERO
    withholding_tax: Decimal = ZERO
    late_deductions: Decimal = ZERO
    undertime_deductions: Decimal = ZERO
    loan_deductions: Decimal = ZERO
    other_deductions: Decimal = ZERO
    total_deductions: Decimal = ZERO
    net_pay: Decimal = ZERO
    applied_rules: tuple[AppliedRule, ...] = ()
    diagnostics: tuple[str, ...] = ()

    def amounts(self) -> dict[str, Decimal]:
        return {f.name: getattr(self, f.name) for f in fields(self) if isinstance(getattr(self, f.name), Decimal)}

    def as_dict(self) -> dict:
        out: dict = {
            "employeeId": self.employee_id,
            "payPeriodStart": self.pay_period_start.isoformat(),
            "payPeriodEnd": self.pay_period_end.isoformat(),
        }
        for name, value in self.amounts().items():
            out[_camel(name)] = str(value)
        out["appliedRules"] = [r.as_dict() for r in self.applied_rules]
        out["diagnostics"] = list(self.diagnostics)
        return out


@dataclass(frozen=True)
class PayrollResult:
    """Persisted computation, unique per (employee, period)."""

    computation: PayrollComputation
    status: PayrollStatus = PayrollStatus.PENDING
    result_id: Optional[int] = None

    @property
    def key(self) -> tuple[int, date, date]:
        c = self.computation
        return (c.employee_id, c.pay_period_start, c.pay_period_end)

    def as_dict(self) -> dict:
        out = self.computation.as_dict()
        out["id"] = self.result_id
        out["status"] = self.status.value
        return out


@dataclass
class GenerationSummary:
    processed: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    negative_net_pay: list[int] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
            "errors": list(self.errors),
            "negativeNetPay": list(self.negative_net_pay),
        }
