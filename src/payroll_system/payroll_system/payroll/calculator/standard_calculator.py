from __future__ import annotations

from ...policy.model import PayrollPolicy
from ..aggregator import aggregate
from ..attendance_summary import summarize_attendance
from ..deductions import compute_deductions
from ..earnings import compute_earnings
from ..model import PayrollComputation
from ..rate_resolver import applicable_rules, resolve_rate
from .base import PayrollCalculator, PayrollInputs


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: attendance summary -> rate -> earnings -> deductions -> net.

    Pure: no I/O, no shared state, safe to run from worker threads.
    """

    def compute(self, inputs: PayrollInputs, policy: PayrollPolicy) -> PayrollComputation:
        if inputs.employee is None:
            return PayrollComputation(
                employee_id=inputs.employee_id,
                pay_period_start=inputs.pay_period_start,
                pay_period_end=inputs.pay_period_end,
                diagnostics=(f"Employee {inputs.employee_id} not found",),
            )

        diagnostics: list[str] = []
        summary = summarize_attendance(inputs.records, policy, inputs.holidays)
        if summary.records_counted == 0:
            diagnostics.append("No attendance in pay period")

        rate = resolve_rate(inputs.employee, inputs.roles, inputs.rules, inputs.assigned_rule_ids, policy)
        if rate.diagnostic:
            diagnostics.append(rate.diagnostic)

        rules = applicable_rules(inputs.rules, inputs.assigned_rule_ids)
        earnings = compute_earnings(summary, rate, rules, policy)
        deductions = compute_deductions(
            summary,
            rate,
            earnings.total_earnings,
            rules,
            policy,
            tax_exempt=earnings.tax_exempt_benefits,
            period_working_days=inputs.period_working_days,
            year_working_days=inputs.year_working_days,
        )

        return aggregate(
            employee_id=inputs.employee_id,
            pay_period_start=inputs.pay_period_start,
            pay_period_end=inputs.pay_period_end,
            summary=summary,
            rate=rate,
            earnings=earnings,
            deductions=deductions,
            diagnostics=diagnostics,
        )
