from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Optional

from ..core.constants import DEFAULT_IMPORT_CHUNK_SIZE, DEFAULT_PAYROLL_WORKERS, DEFAULT_REFERENCE_TIMEZONE
from ..core.enums import DeductionBasis, HolidayType


@dataclass(frozen=True)
class AttendancePolicy:
    """Chính sách chấm công: khung giờ sáng/chiều, ân hạn, ngưỡng nửa ngày."""

    reference_timezone: str = DEFAULT_REFERENCE_TIMEZONE
    morning_start: time = time(8, 0)
    morning_end: time = time(12, 0)
    afternoon_start: time = time(13, 0)
    afternoon_end: time = time(17, 0)
    # IN strictly before this is a morning IN.
    noon_cutoff: time = time(12, 0)
    late_grace_minutes: int = 15
    end_of_day_cutoff: time = time(17, 0)
    half_day_minimum_hours: float = 4.0
    # 12:00-12:59 IN counts as afternoon. Adjustable, not a contract.
    lunch_gap_is_afternoon: bool = True
    # First IN<noon / OUT>=afternoon_start sequence collapses into one full-day session.
    first_sequence_full_day: bool = True
    prevent_duplicate_entries: bool = True
    duplicate_range_hours: float = 1.0
    auto_approve_max_late_hours: float = 2.0
    synthesize_absences: bool = True
    import_chunk_size: int = DEFAULT_IMPORT_CHUNK_SIZE


@dataclass(frozen=True)
class ContributionBracket:
    salary_min: Decimal
    salary_max: Decimal
    employee_rate: Decimal
    min_contribution: Optional[Decimal] = None
    max_contribution: Optional[Decimal] = None


@dataclass(frozen=True)
class ContributionScheme:
    """One statutory scheme. Rates are percentages (e.g. 9 means 9%)."""

    name: str
    employee_rate: Decimal = Decimal("0")
    min_salary: Decimal = Decimal("0")
    max_salary: Decimal = Decimal("0")
    min_contribution: Decimal = Decimal("0")
    max_contribution: Decimal = Decimal("0")
    brackets: tuple[ContributionBracket, ...] = ()


@dataclass(frozen=True)
class TaxBracket:
    """Withholding bracket. ``rate`` is a percentage.

    Bounds are annual amounts when the payroll policy annualizes withholding,
    otherwise amounts per pay period.
    """

    min: Decimal
    max: Optional[Decimal]
    rate: Decimal
    fixed_amount: Optional[Decimal] = None


def _default_tax_brackets() -> tuple[TaxBracket, ...]:
    # Annual table (TRAIN law, 2023 onwards).
    return (
        TaxBracket(min=Decimal("0"), max=Decimal("250000"), rate=Decimal("0")),
        TaxBracket(min=Decimal("250000"), max=Decimal("400000"), rate=Decimal("15")),
        TaxBracket(min=Decimal("400000"), max=Decimal("800000"), rate=Decimal("20")),
        TaxBracket(min=Decimal("800000"), max=Decimal("2000000"), rate=Decimal("25")),
        TaxBracket(min=Decimal("2000000"), max=Decimal("8000000"), rate=Decimal("30")),
        TaxBracket(min=Decimal("8000000"), max=None, rate=Decimal("35")),
    )


@dataclass(frozen=True)
class PayrollPolicy:
    standard_daily_hours: Decimal = Decimal("8")
    lunch_break_hours: Decimal = Decimal("1")
    overtime_minimum_minutes: int = 30
    overtime_rate1: Decimal = Decimal("1.25")
    overtime_rate2: Decimal = Decimal("1.5")
    overtime_tier_cap_hours: Decimal = Decimal("2")
    regular_holiday_rate: Decimal = Decimal("2.0")
    special_holiday_rate: Decimal = Decimal("1.3")
    late_deduction_basis: DeductionBasis = DeductionBasis.HOURLY
    late_deduction_amount: Decimal = Decimal("0")
    undertime_deduction_basis: DeductionBasis = DeductionBasis.HOURLY
    undertime_deduction_amount: Decimal = Decimal("1")
    gsis: ContributionScheme = field(default_factory=lambda: ContributionScheme(name="gsis"))
    philhealth: ContributionScheme = field(default_factory=lambda: ContributionScheme(name="philhealth"))
    pagibig: ContributionScheme = field(default_factory=lambda: ContributionScheme(name="pagibig"))
    tax_brackets: tuple[TaxBracket, ...] = field(default_factory=_default_tax_brackets)
    withholding_enabled: bool = True
    # Scale period income to a year by working days, tax it, then prorate back.
    annualize_withholding: bool = True
    max_workers: int = DEFAULT_PAYROLL_WORKERS

    def holiday_multiplier(self, holiday_type: HolidayType) -> Decimal:
        if holiday_type == HolidayType.REGULAR:
            return self.regular_holiday_rate
        return self.special_holiday_rate


@dataclass(frozen=True)
class PolicyConfig:
    attendance: AttendancePolicy = field(default_factory=AttendancePolicy)
    payroll: PayrollPolicy = field(default_factory=PayrollPolicy)
