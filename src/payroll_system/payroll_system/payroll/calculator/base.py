from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ...attendance.model import AttendanceRecord
from ...core.enums import HolidayType
from ...employees.model import Employee
from ...policy.model import PayrollPolicy
from ..model import PayrollComputation, PayrollRole, PayrollRule


@dataclass(frozen=True)
class PayrollInputs:
    """Everything one employee's computation needs, loaded up front."""

    employee_id: int
    pay_period_start: date
    pay_period_end: date
    employee: Optional[Employee]
    records: tuple[AttendanceRecord, ...] = ()
    holidays: dict[date, HolidayType] = field(default_factory=dict)
    roles: tuple[PayrollRole, ...] = ()
    rules: tuple[PayrollRule, ...] = ()
    assigned_rule_ids: frozenset[int] = frozenset()
    # Work-calendar days, for annualizing withholding tax. 0 means unknown.
    period_working_days: int = 0
    year_working_days: int = 0


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute(self, inputs: PayrollInputs, policy: PayrollPolicy) -> PayrollComputation:
        raise NotImplementedError
