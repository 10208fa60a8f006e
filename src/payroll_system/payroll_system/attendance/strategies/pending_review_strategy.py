from __future__ import annotations

from typing import Optional

from ...core.enums import ApprovalStatus
from ...policy.model import AttendancePolicy
from ..model import AttendanceRecord
from .base import ApprovalDecision, ApprovalStrategy


class PendingReviewStrategy(ApprovalStrategy):
    """Leave the day for an admin to review."""

    def __init__(self, reason: Optional[str] = None):
        self._reason = reason

    def decide(self, *, record: AttendanceRecord, policy: AttendancePolicy) -> ApprovalDecision:
        return ApprovalDecision(status=ApprovalStatus.PENDING, note=self._reason)
