from datetime import time
from decimal import Decimal
from types import SimpleNamespace

import pytest

from config.policy_defaults import attendance_policy_from_env, payroll_policy_from_env
from src.payroll_system.payroll_system.core.enums import DeductionBasis
from src.payroll_system.payroll_system.core.exceptions import ValidationError
from src.payroll_system.payroll_system.policy.loader import load_attendance_policy, load_policy


def test_defaults_without_settings():
    policy = load_policy(None)

    assert policy.attendance.reference_timezone == "Asia/Manila"
    assert policy.attendance.late_grace_minutes == 15
    assert policy.payroll.standard_daily_hours == Decimal("8")


def test_environment_dicts_are_coerced(monkeypatch):
    monkeypatch.setenv("ATT_MORNING_START", "07:30")
    monkeypatch.setenv("ATT_LUNCH_GAP_IS_AFTERNOON", "0")
    monkeypatch.setenv("PAY_LATE_DEDUCTION_BASIS", "per_minute")
    settings = SimpleNamespace(
        ATTENDANCE_POLICY=attendance_policy_from_env(),
        PAYROLL_POLICY=payroll_policy_from_env(),
    )

    policy = load_policy(settings)

    assert policy.attendance.morning_start == time(7, 30)
    assert policy.attendance.lunch_gap_is_afternoon is False
    assert policy.payroll.late_deduction_basis == DeductionBasis.PER_MINUTE
    assert policy.payroll.philhealth.max_contribution == Decimal("2500")
    assert policy.payroll.overtime_rate1 == Decimal("1.25")


@pytest.mark.parametrize(
    "values",
    [
        {"morning_start": "12:00", "morning_end": "08:00"},
        {"late_grace_minutes": -1},
        {"half_day_minimum_hours": 9},
        {"duplicate_range_hours": 0},
        {"reference_timezone": "Nowhere/Land"},
        {"morning_start": "8am"},
    ],
)
def test_invalid_attendance_policy_is_rejected(values):
    with pytest.raises(ValidationError):
        load_attendance_policy(values)
