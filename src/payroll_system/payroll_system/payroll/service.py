from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_period
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..policy.model import PayrollPolicy
from ..work_calendar.service import WorkCalendar, working_days_between
from .aggregator import PayrollAggregator
from .calculator.base import PayrollCalculator, PayrollInputs
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import GenerationSummary, PayrollComputation, PayrollResult
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        payroll: PayrollRepository,
        work_calendar: WorkCalendar,
        policy: PayrollPolicy,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._payroll = payroll
        self._calendar = work_calendar
        self._policy = policy
        self._calculator = calculator or StandardPayrollCalculator()
        self._aggregator = PayrollAggregator(payroll)

    def compute_payroll(self, employee_id: int, start: date, end: date) -> PayrollComputation:
        """Compute without persisting. Unknown employee or no data gives a zero computation."""
        require_period(start, end)
        employee = self._employees.get_by_id(employee_id)
        records = self._attendance.list_between(start, end, employee_ids=[employee_id]) if employee else []
        assigned = self._payroll.assigned_rule_ids([employee_id]).get(employee_id, set()) if employee else set()
        period_days, year_days = self._working_day_counts(start, end)

        inputs = PayrollInputs(
            employee_id=employee_id,
            pay_period_start=start,
            pay_period_end=end,
            employee=employee,
            records=tuple(records),
            holidays=self._calendar.holidays_between(start, end),
            roles=tuple(self._payroll.list_roles()),
            rules=tuple(self._payroll.list_rules()),
            assigned_rule_ids=frozenset(assigned),
            period_working_days=period_days,
            year_working_days=year_days,
        )
        computation = self._calculator.compute(inputs, self._policy)
        for note in computation.diagnostics:
            logger.info("Payroll %s (%s..%s): %s", employee_id, start, end, note)
        return computation

    def generate_for_period(
        self, start: date, end: date, employee_ids: Optional[Iterable[int]] = None
    ) -> GenerationSummary:
        """Compute in parallel per employee, then persist sequentially."""
        require_period(start, end)
        employees = self._load_employees(employee_ids)
        ids = [e.employee_id for e in employees]

        # Lookups happen once, before any worker starts.
        holidays = self._calendar.holidays_between(start, end)
        roles = tuple(self._payroll.list_roles())
        rules = tuple(self._payroll.list_rules())
        assigned = self._payroll.assigned_rule_ids(ids)
        period_days, year_days = self._working_day_counts(start, end)
        by_employee: dict[int, list[AttendanceRecord]] = defaultdict(list)
        for r in self._attendance.list_between(start, end, employee_ids=ids):
            by_employee[r.employee_id].append(r)

        inputs = [
            PayrollInputs(
                employee_id=e.employee_id,
                pay_period_start=start,
                pay_period_end=end,
                employee=e,
                records=tuple(by_employee.get(e.employee_id, ())),
                holidays=dict(holidays),
                roles=roles,
                rules=rules,
                assigned_rule_ids=frozenset(assigned.get(e.employee_id, set())),
                period_working_days=period_days,
                year_working_days=year_days,
            )
            for e in employees
        ]

        summary = GenerationSummary()
        with ThreadPoolExecutor(max_workers=max(1, self._policy.max_workers)) as pool:
            futures = [(i.employee_id, pool.submit(self._calculator.compute, i, self._policy)) for i in inputs]
            computations: list[PayrollComputation] = []
            for employee_id, future in futures:
                try:
                    computations.append(future.result())
                except Exception as e:
                    logger.exception("Payroll computation failed for employee %s", employee_id)
                    summary.failed += 1
                    summary.errors.append(f"Employee {employee_id}: {e}")

        for computation in computations:
            try:
                _, created = self._aggregator.save(computation)
            except Exception as e:
                logger.exception("Saving payroll failed for employee %s", computation.employee_id)
                summary.failed += 1
                summary.errors.append(f"Employee {computation.employee_id}: {e}")
                continue
            summary.processed += 1
            if created:
                summary.created += 1
            else:
                summary.updated += 1
            if computation.net_pay < 0:
                summary.negative_net_pay.append(computation.employee_id)

        logger.info(
            "Payroll %s..%s: %s processed (%s created, %s updated), %s failed",
            start,
            end,
            summary.processed,
            summary.created,
            summary.updated,
            summary.failed,
        )
        return summary

    def results_for_employee(
        self, employee_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[PayrollResult]:
        return self._payroll.list_results_for_employee(employee_id, start=start, end=end)

    def _working_day_counts(self, start: date, end: date) -> tuple[int, int]:
        """Working days in the period and in the calendar year the period starts in."""
        period = working_days_between(self._calendar, start, end)
        year = working_days_between(self._calendar, date(start.year, 1, 1), date(start.year, 12, 31))
        return len(period), len(year)

    def _load_employees(self, employee_ids: Optional[Iterable[int]]) -> list[Employee]:
        if employee_ids is None:
            return list(self._employees.list_active())
        out: list[Employee] = []
        for employee_id in employee_ids:
            employee = self._employees.get_by_id(int(employee_id))
            if employee is None:
                logger.warning("Skipping unknown employee %s in payroll run", employee_id)
                continue
            out.append(employee)
        return out
