"""Giá trị mặc định cho chính sách chấm công / tính lương, đọc từ biến môi trường.

Các module settings (development/testing/production) import hai hàm dưới đây;
``policy/loader.py`` chuyển dict thành ``PolicyConfig`` lúc khởi động.
"""

import os


def attendance_policy_from_env() -> dict:
    return {
        "reference_timezone": os.getenv("ATT_TIMEZONE", "Asia/Manila"),
        "morning_start": os.getenv("ATT_MORNING_START", "08:00"),
        "morning_end": os.getenv("ATT_MORNING_END", "12:00"),
        "afternoon_start": os.getenv("ATT_AFTERNOON_START", "13:00"),
        "afternoon_end": os.getenv("ATT_AFTERNOON_END", "17:00"),
        "late_grace_minutes": os.getenv("ATT_LATE_GRACE_MINUTES", "15"),
        "end_of_day_cutoff": os.getenv("ATT_END_OF_DAY_CUTOFF", "17:00"),
        "half_day_minimum_hours": os.getenv("ATT_HALF_DAY_MIN_HOURS", "4"),
        "lunch_gap_is_afternoon": os.getenv("ATT_LUNCH_GAP_IS_AFTERNOON", "1"),
        "first_sequence_full_day": os.getenv("ATT_FIRST_SEQUENCE_FULL_DAY", "1"),
        "prevent_duplicate_entries": os.getenv("ATT_PREVENT_DUPLICATES", "1"),
        "duplicate_range_hours": os.getenv("ATT_DUPLICATE_RANGE_HOURS", "1"),
        "auto_approve_max_late_hours": os.getenv("ATT_AUTO_APPROVE_MAX_LATE_HOURS", "2"),
        "synthesize_absences": os.getenv("ATT_SYNTHESIZE_ABSENCES", "1"),
        "import_chunk_size": os.getenv("ATT_IMPORT_CHUNK_SIZE", "500"),
    }


def payroll_policy_from_env() -> dict:
    return {
        "standard_daily_hours": os.getenv("PAY_STANDARD_DAILY_HOURS", "8"),
        "lunch_break_hours": os.getenv("PAY_LUNCH_BREAK_HOURS", "1"),
        "overtime_minimum_minutes": os.getenv("PAY_OVERTIME_MINIMUM_MINUTES", "30"),
        "overtime_rate1": os.getenv("PAY_OVERTIME_RATE1", "1.25"),
        "overtime_rate2": os.getenv("PAY_OVERTIME_RATE2", "1.5"),
        "overtime_tier_cap_hours": os.getenv("PAY_OVERTIME_TIER_CAP_HOURS", "2"),
        "regular_holiday_rate": os.getenv("PAY_REGULAR_HOLIDAY_RATE", "2.0"),
        "special_holiday_rate": os.getenv("PAY_SPECIAL_HOLIDAY_RATE", "1.3"),
        "late_deduction_basis": os.getenv("PAY_LATE_DEDUCTION_BASIS", "hourly"),
        "late_deduction_amount": os.getenv("PAY_LATE_DEDUCTION_AMOUNT", "0"),
        "undertime_deduction_basis": os.getenv("PAY_UNDERTIME_DEDUCTION_BASIS", "hourly"),
        "undertime_deduction_amount": os.getenv("PAY_UNDERTIME_DEDUCTION_AMOUNT", "1"),
        "withholding_enabled": os.getenv("PAY_WITHHOLDING_ENABLED", "1"),
        "annualize_withholding": os.getenv("PAY_ANNUALIZE_WITHHOLDING", "1"),
        "max_workers": os.getenv("PAY_MAX_WORKERS", "4"),
        # Rates are percentages of the monthly salary base.
        "gsis": {"employee_rate": "9", "min_salary": "0", "max_salary": "0"},
        "philhealth": {
            "employee_rate": "2.5",
            "min_salary": "10000",
            "max_salary": "100000",
            "min_contribution": "250",
            "max_contribution": "2500",
        },
        "pagibig": {
            "employee_rate": "2",
            "min_salary": "0",
            "max_salary": "5000",
            "max_contribution": "100",
        },
    }
