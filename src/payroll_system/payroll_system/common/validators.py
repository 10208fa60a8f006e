from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_period(start: date, end: date) -> tuple[date, date]:
    if start > end:
        raise ValidationError("Pay period start must not be after its end")
    return start, end


def to_decimal(value, field_name: str = "amount") -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field_name} is not a number: {value!r}") from e


def clean_cell(value) -> str | None:
    """Normalize a tabular cell: NaN/None/blank -> None."""
    if value is None:
        return None
    # float('nan') != itself
    if isinstance(value, float) and value != value:
        return None
    text = str(value).strip()
    if not text or text.lower() in {"nan", "nat", "none"}:
        return None
    return text
