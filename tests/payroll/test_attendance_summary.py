from datetime import date
from decimal import Decimal

from src.payroll_system.payroll_system.attendance.model import AttendanceRecord
from src.payroll_system.payroll_system.core.enums import ApprovalStatus, HolidayType
from src.payroll_system.payroll_system.payroll.attendance_summary import summarize_attendance


def _rec(day: int, hours: float, **kw) -> AttendanceRecord:
    base = dict(
        employee_id=1,
        business_day=date(2025, 10, day),
        hours_worked=hours,
        total_sessions=2,
        approval_status=ApprovalStatus.APPROVED,
    )
    base.update(kw)
    return AttendanceRecord(**base)


def test_summary_counts_days_hours_overtime_and_undertime(payroll_policy):
    records = [
        _rec(13, 9.17, full_day_span=True, is_late=True, late_minutes=30),
        _rec(14, 11.0),
        _rec(15, 4.53, is_half_day=True, total_sessions=1),
        _rec(16, 6.0),
        _rec(17, 8.0, approval_status=ApprovalStatus.REJECTED),
        _rec(20, None, is_absent=True, total_sessions=0),
    ]

    s = summarize_attendance(records, payroll_policy)

    assert s.records_counted == 4
    assert s.days_worked == Decimal("3.5")
    # 9.17 less the lunch hour for a single span
    assert s.hours_worked == Decimal("29.70")
    assert s.overtime_hours == Decimal("3.00")
    assert s.undertime_hours == Decimal("2.00")
    assert s.undertime_instances == 1
    assert s.late_hours == Decimal("0.50")
    assert s.late_instances == 1


def test_short_overtime_below_minimum_is_ignored(payroll_policy):
    s = summarize_attendance([_rec(13, 8.25)], payroll_policy)
    assert s.overtime_hours == Decimal("0.00")


def test_holiday_hours_exclude_overtime(payroll_policy):
    holidays = {date(2025, 10, 14): HolidayType.REGULAR}
    s = summarize_attendance([_rec(13, 8.0), _rec(14, 11.0)], payroll_policy, holidays)

    assert s.holiday_hours_by_type == {HolidayType.REGULAR: Decimal("8.00")}
    assert s.holiday_hours == Decimal("8.00")
