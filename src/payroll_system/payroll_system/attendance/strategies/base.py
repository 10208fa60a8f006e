from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import ApprovalStatus
from ...policy.model import AttendancePolicy
from ..model import AttendanceRecord


@dataclass(frozen=True)
class ApprovalDecision:
    status: ApprovalStatus
    note: Optional[str] = None


class ApprovalStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide the initial approval status of a day."""

    @abstractmethod
    def decide(self, *, record: AttendanceRecord, policy: AttendancePolicy) -> ApprovalDecision:
        raise NotImplementedError
