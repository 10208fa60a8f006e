from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Vai trò người dùng dùng cho phân quyền."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class PunchDirection(str, Enum):
    """Hướng chấm công của một lần quẹt thẻ."""

    IN = "IN"
    OUT = "OUT"


class ApprovalStatus(str, Enum):
    """Trạng thái duyệt của bản ghi chấm công."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class SessionType(str, Enum):
    HALF_DAY = "HALF_DAY"
    FULL_DAY = "FULL_DAY"


class SessionSlot(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"


class RuleKind(str, Enum):
    """Loại quy tắc lương (base / phụ cấp / thưởng / khấu trừ)."""

    BASE = "base"
    ALLOWANCE = "allowance"
    BONUS = "bonus"
    ADDITIONAL = "additional"
    DEDUCTION = "deduction"


class ComputationBasis(str, Enum):
    GROSS = "gross"
    BASIC = "basic"


class HolidayType(str, Enum):
    REGULAR = "REGULAR"
    SPECIAL = "SPECIAL"


class DeductionBasis(str, Enum):
    """How late/undertime hours are turned into money."""

    HOURLY = "hourly"
    FIXED = "fixed"
    DAILY = "daily"
    PER_MINUTE = "per_minute"


class PayrollStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    RELEASED = "RELEASED"
