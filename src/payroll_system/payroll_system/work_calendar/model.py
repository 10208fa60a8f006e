from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import HolidayType


@dataclass(frozen=True)
class Holiday:
    """Ngày lễ. Recurring holidays repeat every year on the same month/day."""

    holiday_date: date
    name: str
    holiday_type: HolidayType = HolidayType.REGULAR
    is_recurring: bool = False


@dataclass(frozen=True)
class CalendarOverride:
    """Per-month exceptions to the weekday rule (day-of-month numbers)."""

    year: int
    month: int
    no_work_days: tuple[int, ...] = ()
    working_weekend_days: tuple[int, ...] = ()
