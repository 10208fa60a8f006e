"""Build a ``PolicyConfig`` from the settings module dicts.

The settings modules (``config.development`` etc.) expose plain dicts read from
the environment; this module validates and freezes them once at startup.
"""

from __future__ import annotations

from dataclasses import fields
from datetime import time
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.datetime_utils import get_zone, parse_hhmm
from ..common.validators import to_decimal
from ..core.enums import DeductionBasis
from ..core.exceptions import ValidationError
from .model import AttendancePolicy, ContributionBracket, ContributionScheme, PayrollPolicy, PolicyConfig, TaxBracket

_TRUE = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE


def _coerce(kind: Any, value: Any, name: str) -> Any:
    if kind is time or kind == "time":
        return parse_hhmm(value)
    if kind is bool or kind == "bool":
        return _as_bool(value)
    if kind is int or kind == "int":
        return int(value)
    if kind is float or kind == "float":
        return float(value)
    if kind is Decimal or kind == "Decimal":
        return to_decimal(value, name)
    if kind is DeductionBasis or kind == "DeductionBasis":
        try:
            return DeductionBasis(str(value))
        except ValueError as e:
            raise ValidationError(f"{name}: unknown deduction basis {value!r}") from e
    return value


def load_attendance_policy(values: Optional[Mapping[str, Any]]) -> AttendancePolicy:
    values = dict(values or {})
    kwargs: dict[str, Any] = {}
    for f in fields(AttendancePolicy):
        if f.name in values and values[f.name] is not None:
            kwargs[f.name] = _coerce(f.type, values[f.name], f.name)
    policy = AttendancePolicy(**kwargs)
    validate_attendance_policy(policy)
    return policy


def validate_attendance_policy(policy: AttendancePolicy) -> None:
    get_zone(policy.reference_timezone)
    if policy.morning_start >= policy.morning_end:
        raise ValidationError("Morning start time must be before morning end time.")
    if policy.afternoon_start >= policy.afternoon_end:
        raise ValidationError("Afternoon start time must be before afternoon end time.")
    if policy.morning_end > policy.afternoon_start:
        raise ValidationError("Morning session must end before afternoon session starts.")
    if policy.late_grace_minutes < 0:
        raise ValidationError("Late grace minutes must not be negative.")
    if not 1 <= policy.half_day_minimum_hours <= 8:
        raise ValidationError("Half-day minimum hours must be between 1 and 8 hours.")
    if not 1 <= policy.duplicate_range_hours <= 12:
        raise ValidationError("Duplicate range hours must be between 1 and 12 hours.")
    if policy.import_chunk_size <= 0:
        raise ValidationError("Import chunk size must be positive.")


def _load_scheme(name: str, values: Optional[Mapping[str, Any]]) -> ContributionScheme:
    values = dict(values or {})
    brackets = tuple(
        ContributionBracket(
            salary_min=to_decimal(b.get("salary_min"), "salary_min"),
            salary_max=to_decimal(b.get("salary_max"), "salary_max"),
            employee_rate=to_decimal(b.get("employee_rate"), "employee_rate"),
            min_contribution=to_decimal(b["min_contribution"]) if b.get("min_contribution") is not None else None,
            max_contribution=to_decimal(b["max_contribution"]) if b.get("max_contribution") is not None else None,
        )
        for b in values.get("brackets", ())
    )
    return ContributionScheme(
        name=name,
        employee_rate=to_decimal(values.get("employee_rate"), f"{name}.employee_rate"),
        min_salary=to_decimal(values.get("min_salary"), f"{name}.min_salary"),
        max_salary=to_decimal(values.get("max_salary"), f"{name}.max_salary"),
        min_contribution=to_decimal(values.get("min_contribution"), f"{name}.min_contribution"),
        max_contribution=to_decimal(values.get("max_contribution"), f"{name}.max_contribution"),
        brackets=brackets,
    )


def _load_tax_brackets(rows) -> tuple[TaxBracket, ...]:
    brackets = []
    for row in rows:
        upper = row.get("max")
        brackets.append(
            TaxBracket(
                min=to_decimal(row.get("min"), "tax.min"),
                max=to_decimal(upper, "tax.max") if upper not in (None, "") else None,
                rate=to_decimal(row.get("rate"), "tax.rate"),
                fixed_amount=to_decimal(row["fixed_amount"]) if row.get("fixed_amount") is not None else None,
            )
        )
    brackets.sort(key=lambda b: b.min)
    return tuple(brackets)


_SCHEMES = ("gsis", "philhealth", "pagibig")


def load_payroll_policy(values: Optional[Mapping[str, Any]]) -> PayrollPolicy:
    values = dict(values or {})
    kwargs: dict[str, Any] = {}
    for f in fields(PayrollPolicy):
        if f.name in _SCHEMES or f.name == "tax_brackets":
            continue
        if f.name in values and values[f.name] is not None:
            kwargs[f.name] = _coerce(f.type, values[f.name], f.name)
    for name in _SCHEMES:
        if name in values:
            kwargs[name] = _load_scheme(name, values[name])
    if values.get("tax_brackets"):
        kwargs["tax_brackets"] = _load_tax_brackets(values["tax_brackets"])

    policy = PayrollPolicy(**kwargs)
    if policy.standard_daily_hours <= 0:
        raise ValidationError("Standard daily hours must be positive.")
    return policy


def load_policy(settings: Any) -> PolicyConfig:
    """Read ``ATTENDANCE_POLICY`` / ``PAYROLL_POLICY`` off a settings module."""
    return PolicyConfig(
        attendance=load_attendance_policy(getattr(settings, "ATTENDANCE_POLICY", None)),
        payroll=load_payroll_policy(getattr(settings, "PAYROLL_POLICY", None)),
    )
