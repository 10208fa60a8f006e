from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from .model import PayrollResult, PayrollRole, PayrollRule


class PayrollRepository(Protocol):
    def list_roles(self) -> Sequence[PayrollRole]:
        raise NotImplementedError

    def list_rules(self) -> Sequence[PayrollRule]:
        raise NotImplementedError

    def assigned_rule_ids(self, employee_ids: Iterable[int]) -> dict[int, set[int]]:
        """employee_id -> ids of rules explicitly assigned to that employee."""

        raise NotImplementedError

    def get_result(self, employee_id: int, start: date, end: date) -> Optional[PayrollResult]:
        raise NotImplementedError

    def upsert_result(self, result: PayrollResult) -> int:
        """Insert or update keyed by (employee_id, pay_period_start, pay_period_end). Returns the row id."""

        raise NotImplementedError

    def append_summary_row(self, result: PayrollResult) -> None:
        """Flat summary row read by external reporting."""

        raise NotImplementedError

    def list_results_for_employee(
        self, employee_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[PayrollResult]:
        raise NotImplementedError
