from __future__ import annotations

from dataclasses import dataclass

from ..policy.model import AttendancePolicy
from .model import AttendanceRecord
from .strategies.auto_approve_strategy import AutoApproveStrategy
from .strategies.base import ApprovalStrategy
from .strategies.pending_review_strategy import PendingReviewStrategy


@dataclass
class ApprovalStrategyFactory:
    """Factory Pattern: choose appropriate approval strategy based on rules."""

    def for_record(self, *, record: AttendanceRecord, policy: AttendancePolicy) -> ApprovalStrategy:
        if record.total_sessions == 0:
            return AutoApproveStrategy()

        if record.time_in is None or record.time_out is None:
            return PendingReviewStrategy("Incomplete punches")

        if record.late_minutes > policy.auto_approve_max_late_hours * 60:
            return PendingReviewStrategy(f"Late by more than {policy.auto_approve_max_late_hours:g} hours")
        return AutoApproveStrategy()
