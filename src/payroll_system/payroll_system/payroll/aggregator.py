from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Sequence

from ..common.money import money
from ..core.enums import PayrollStatus
from .model import AttendanceSummary, Deductions, Earnings, PayrollComputation, PayrollResult, RateResolution
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


def aggregate(
    *,
    employee_id: int,
    pay_period_start: date,
    pay_period_end: date,
    summary: AttendanceSummary,
    rate: RateResolution,
    earnings: Earnings,
    deductions: Deductions,
    diagnostics: Sequence[str] = (),
) -> PayrollComputation:
    """Sum into gross / total deductions / net. Net pay is never clamped."""
    gross = earnings.total_earnings
    total_deductions = deductions.total_deductions
    net = gross - total_deductions

    notes = list(diagnostics)
    if net < 0:
        notes.append(f"Net pay is negative ({net}); deductions exceed gross pay")

    return PayrollComputation(
        employee_id=employee_id,
        pay_period_start=pay_period_start,
        pay_period_end=pay_period_end,
        daily_rate=money(rate.daily_rate),
        hourly_rate=money(rate.hourly_rate),
        days_worked=summary.days_worked,
        hours_worked=summary.hours_worked,
        overtime_hours=summary.overtime_hours,
        undertime_hours=summary.undertime_hours,
        late_hours=summary.late_hours,
        holiday_hours=summary.holiday_hours,
        regular_pay=earnings.regular_pay,
        overtime_pay=earnings.overtime_pay,
        holiday_pay=earnings.holiday_pay,
        allowances=earnings.allowances,
        bonuses=earnings.bonuses,
        thirteenth_month_pay=earnings.thirteenth_month_pay,
        service_incentive_leave=earnings.service_incentive_leave,
        other_earnings=earnings.other_earnings,
        total_earnings=gross,
        gross_pay=gross,
        gsis_contribution=deductions.gsis_contribution,
        philhealth_contribution=deductions.philhealth_contribution,
        pagibig_contribution=deductions.pagibig_contribution,
        taxable_income=money(deductions.taxable_income),
        withholding_tax=deductions.withholding_tax,
        late_deductions=deductions.late_deductions,
        undertime_deductions=deductions.undertime_deductions,
        loan_deductions=deductions.loan_deductions,
        other_deductions=deductions.other_deductions,
        total_deductions=total_deductions,
        net_pay=net,
        applied_rules=earnings.applied_rules + deductions.applied_rules,
        diagnostics=tuple(notes),
    )


class PayrollAggregator:
    """Persist computations as payroll results keyed by (employee, period)."""

    def __init__(self, payroll: PayrollRepository):
        self._payroll = payroll

    def save(self, computation: PayrollComputation) -> tuple[PayrollResult, bool]:
        """Upsert; returns (result, created). A status set by a reviewer is kept."""
        existing = self._payroll.get_result(
            computation.employee_id, computation.pay_period_start, computation.pay_period_end
        )
        if existing is None:
            result = PayrollResult(computation=computation, status=PayrollStatus.PENDING)
        else:
            result = replace(existing, computation=computation)

        result_id = self._payroll.upsert_result(result)
        result = replace(result, result_id=result_id)
        self._payroll.append_summary_row(result)

        if computation.net_pay < 0:
            logger.warning(
                "Negative net pay %s for employee %s (%s..%s)",
                computation.net_pay,
                computation.employee_id,
                computation.pay_period_start,
                computation.pay_period_end,
            )
        return result, existing is None
