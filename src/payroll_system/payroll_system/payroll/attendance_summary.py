from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping

from ..attendance.model import AttendanceRecord
from ..common.money import ZERO, hours
from ..core.enums import ApprovalStatus, HolidayType
from ..policy.model import PayrollPolicy
from .model import AttendanceSummary

_HALF = Decimal("0.5")
_SIXTY = Decimal(60)


def payable_hours(record: AttendanceRecord, policy: PayrollPolicy) -> Decimal:
    """Hours counted for pay. A single in/out spanning lunch loses the lunch break."""
    worked = hours(record.hours_worked or 0)
    if record.full_day_span:
        worked = max(worked - policy.lunch_break_hours, ZERO)
    return worked


def summarize_attendance(
    records: Iterable[AttendanceRecord],
    policy: PayrollPolicy,
    holidays: Mapping[date, HolidayType] | None = None,
) -> AttendanceSummary:
    holidays = holidays or {}
    standard = policy.standard_daily_hours
    ot_minimum = Decimal(policy.overtime_minimum_minutes) / _SIXTY

    days = ZERO
    total = ZERO
    overtime = ZERO
    undertime = ZERO
    late_minutes = 0
    late_instances = 0
    undertime_instances = 0
    by_type: dict[HolidayType, Decimal] = {}
    counted = 0

    for r in records:
        if r.approval_status == ApprovalStatus.REJECTED or r.is_absent:
            continue
        counted += 1

        worked = payable_hours(r, policy)
        days += _HALF if r.is_half_day else Decimal(1)
        total += worked

        extra = worked - standard
        day_overtime = extra if extra > 0 and extra >= ot_minimum else ZERO
        overtime += day_overtime

        expected = standard / 2 if r.is_half_day else standard
        if worked < expected:
            undertime += expected - worked
            undertime_instances += 1

        if r.is_late:
            late_instances += 1
            late_minutes += int(r.late_minutes)

        holiday_type = holidays.get(r.business_day)
        if holiday_type is not None:
            by_type[holiday_type] = by_type.get(holiday_type, ZERO) + (worked - day_overtime)

    return AttendanceSummary(
        days_worked=days,
        hours_worked=hours(total),
        overtime_hours=hours(overtime),
        undertime_hours=hours(undertime),
        late_hours=hours(Decimal(late_minutes) / _SIXTY),
        late_minutes=late_minutes,
        late_instances=late_instances,
        undertime_instances=undertime_instances,
        holiday_hours_by_type={k: hours(v) for k, v in by_type.items()},
        records_counted=counted,
    )
