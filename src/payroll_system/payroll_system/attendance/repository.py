from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Iterable, Optional, Protocol, Sequence

from ..core.enums import ApprovalStatus
from .model import AttendanceRecord, ImportBatch, Punch


class AttendanceRepository(Protocol):
    def get_for_day(self, employee_id: int, business_day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(
        self, start: date, end: date, *, employee_ids: Optional[Iterable[int]] = None
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def existing_keys(self, start: date, end: date) -> set[tuple[int, date]]:
        raise NotImplementedError

    def upsert_many(self, records: Sequence[AttendanceRecord]) -> None:
        """Insert or update keyed by (employee_id, business_day). Safe to retry."""

        raise NotImplementedError

    def update_approval(
        self,
        *,
        employee_id: int,
        business_day: date,
        status: ApprovalStatus,
        approved_by: Optional[int],
        rejection_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def lock_day(self, employee_id: int, business_day: date) -> ContextManager[None]:
        """Serialize live mutations of one employee-day."""

        raise NotImplementedError


class PunchRepository(Protocol):
    def list_between(
        self, start: datetime, end: datetime, *, employee_ids: Optional[Iterable[int]] = None
    ) -> Sequence[Punch]:
        """Punches with ``start <= instant < end`` (aware UTC bounds)."""

        raise NotImplementedError

    def add_many(self, punches: Sequence[Punch]) -> int:
        """Store punches, ignoring ones already stored. Returns the number inserted."""

        raise NotImplementedError


class ImportBatchRepository(Protocol):
    def create(self, batch: ImportBatch) -> int:
        raise NotImplementedError

    def find_by_checksum(self, checksum: str) -> Optional[ImportBatch]:
        raise NotImplementedError

    def update_summary(self, batch_id: int, summary: dict) -> None:
        raise NotImplementedError

    def list_recent(self, limit: int) -> Sequence[ImportBatch]:
        raise NotImplementedError
