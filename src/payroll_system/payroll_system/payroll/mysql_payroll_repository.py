from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..core.enums import ComputationBasis, PayrollStatus, RuleKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AppliedRule, PayrollComputation, PayrollResult, PayrollRole, PayrollRule
from .repository import PayrollRepository

_AMOUNT_COLUMNS = (
    "daily_rate",
    "hourly_rate",
    "days_worked",
    "hours_worked",
    "overtime_hours",
    "undertime_hours",
    "late_hours",
    "holiday_hours",
    "regular_pay",
    "overtime_pay",
    "holiday_pay",
    "allowances",
    "bonuses",
    "thirteenth_month_pay",
    "service_incentive_leave",
    "other_earnings",
    "total_earnings",
    "gross_pay",
    "gsis_contribution",
    "philhealth_contribution",
    "pagibig_contribution",
    "taxable_income",
    "withholding_tax",
    "late_deductions",
    "undertime_deductions",
    "loan_deductions",
    "other_deductions",
    "total_deductions",
    "net_pay",
)

_RESULT_COLUMNS = (
    "employee_id",
    "pay_period_start",
    "pay_period_end",
    *_AMOUNT_COLUMNS,
    "status",
    "applied_rules_snapshot",
    "diagnostics",
)

_SELECT_RESULT = "SELECT result_id, " + ", ".join(_RESULT_COLUMNS) + " FROM payroll_results"

# status is left untouched on conflict.
_UPSERT_RESULT = (
    "INSERT INTO payroll_results(" + ", ".join(_RESULT_COLUMNS) + ") "
    "VALUES(" + ",".join(["%s"] * len(_RESULT_COLUMNS)) + ") "
    "ON DUPLICATE KEY UPDATE result_id=LAST_INSERT_ID(result_id), "
    + ", ".join(f"{c}=VALUES({c})" for c in (*_AMOUNT_COLUMNS, "applied_rules_snapshot", "diagnostics"))
)


def _dec(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _opt_dec(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def _applied_from_json(items) -> tuple[AppliedRule, ...]:
    return tuple(
        AppliedRule(
            rule_id=int(i["ruleId"]),
            name=i["ruleName"],
            kind=RuleKind(i["ruleType"]),
            category=i.get("category"),
            amount=Decimal(i["amount"]),
            rate=Decimal(i["rate"]) if i.get("rate") is not None else None,
        )
        for i in items or []
    )


def _to_result(r: dict) -> PayrollResult:
    computation = PayrollComputation(
        employee_id=int(r["employee_id"]),
        pay_period_start=r["pay_period_start"],
        pay_period_end=r["pay_period_end"],
        applied_rules=_applied_from_json(json.loads(r.get("applied_rules_snapshot") or "[]")),
        diagnostics=tuple(json.loads(r.get("diagnostics") or "[]")),
        **{c: _dec(r.get(c)) for c in _AMOUNT_COLUMNS},
    )
    return PayrollResult(
        computation=computation,
        status=PayrollStatus(r["status"]),
        result_id=int(r["result_id"]),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_roles(self) -> Sequence[PayrollRole]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT role_id, employee_id, department, position, daily_rate, is_active
                FROM payroll_roles
                WHERE is_active=1
                """
            )
            return [
                PayrollRole(
                    role_id=int(r["role_id"]),
                    employee_id=r.get("employee_id"),
                    department=r.get("department"),
                    position=r.get("position"),
                    daily_rate=_dec(r["daily_rate"]),
                    is_active=bool(r["is_active"]),
                )
                for r in fetchall(cur)
            ]

    def list_rules(self) -> Sequence[PayrollRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT rule_id, name, kind, category, amount, is_percentage, computation_basis,
                       min_amount, max_amount, applies_to_all, is_active
                FROM payroll_rules
                WHERE is_active=1
                ORDER BY rule_id
                """
            )
            return [
                PayrollRule(
                    rule_id=int(r["rule_id"]),
                    name=r["name"],
                    kind=RuleKind(r["kind"]),
                    category=r.get("category"),
                    amount=_dec(r["amount"]),
                    is_percentage=bool(r.get("is_percentage")),
                    computation_basis=ComputationBasis(r.get("computation_basis") or ComputationBasis.GROSS.value),
                    min_amount=_opt_dec(r.get("min_amount")),
                    max_amount=_opt_dec(r.get("max_amount")),
                    applies_to_all=bool(r.get("applies_to_all")),
                    is_active=bool(r["is_active"]),
                )
                for r in fetchall(cur)
            ]

    def assigned_rule_ids(self, employee_ids: Iterable[int]) -> dict[int, set[int]]:
        ids = [int(i) for i in employee_ids]
        out: dict[int, set[int]] = {i: set() for i in ids}
        if not ids:
            return out
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id, rule_id FROM payroll_rule_assignments WHERE employee_id IN ("
                + ",".join(["%s"] * len(ids))
                + ")",
                tuple(ids),
            )
            for r in fetchall(cur):
                out.setdefault(int(r["employee_id"]), set()).add(int(r["rule_id"]))
        return out

    def get_result(self, employee_id: int, start: date, end: date) -> Optional[PayrollResult]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT_RESULT} WHERE employee_id=%s AND pay_period_start=%s AND pay_period_end=%s",
                (int(employee_id), start, end),
            )
            r = fetchone(cur)
            return _to_result(r) if r else None

    def upsert_result(self, result: PayrollResult) -> int:
        c = result.computation
        params = (
            c.employee_id,
            c.pay_period_start,
            c.pay_period_end,
            *(getattr(c, col) for col in _AMOUNT_COLUMNS),
            result.status.value,
            json.dumps([a.as_dict() for a in c.applied_rules]),
            json.dumps(list(c.diagnostics)),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_UPSERT_RESULT, params)
            return int(cur.lastrowid)

    def append_summary_row(self, result: PayrollResult) -> None:
        c = result.computation
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_summaries(
                    result_id, employee_id, pay_period_start, pay_period_end,
                    days_worked, gross_pay, total_deductions, net_pay, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    result.result_id,
                    c.employee_id,
                    c.pay_period_start,
                    c.pay_period_end,
                    c.days_worked,
                    c.gross_pay,
                    c.total_deductions,
                    c.net_pay,
                    result.status.value,
                ),
            )

    def list_results_for_employee(
        self, employee_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[PayrollResult]:
        sql = f"{_SELECT_RESULT} WHERE employee_id=%s"
        params: list = [int(employee_id)]
        if start is not None:
            sql += " AND pay_period_end >= %s"
            params.append(start)
        if end is not None:
            sql += " AND pay_period_start <= %s"
            params.append(end)
        sql += " ORDER BY pay_period_start DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_result(r) for r in fetchall(cur)]
