from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..core.constants import CURRENCY_QUANT, HOURS_PRECISION

ZERO = Decimal("0")
_CENTS = Decimal(CURRENCY_QUANT)
_HOURS = Decimal(1).scaleb(-HOURS_PRECISION)


def money(value) -> Decimal:
    """Quantize to cents. Totals are always summed from already-quantized parts."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def hours(value) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(_HOURS, rounding=ROUND_HALF_UP)


def clamp(value: Decimal, low: Decimal | None, high: Decimal | None) -> Decimal:
    if low is not None and value < low:
        value = low
    if high is not None and value > high:
        value = high
    return value
