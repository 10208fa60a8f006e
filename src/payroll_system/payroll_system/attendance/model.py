from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ApprovalStatus, PunchDirection, SessionType


@dataclass(frozen=True)
class Punch:
    """Một lần quẹt thẻ (bất biến). ``instant`` is aware UTC."""

    employee_id: int
    instant: datetime
    direction: PunchDirection
    raw_status_text: str = ""
    source_location: Optional[str] = None
    source_department: Optional[str] = None
    import_batch_id: Optional[int] = None

    @property
    def key(self) -> tuple[int, datetime, PunchDirection]:
        return (self.employee_id, self.instant, self.direction)


@dataclass(frozen=True)
class PunchSequence:
    """One (IN, OUT) pair folded by the sequencer. Either side may be missing."""

    time_in: Optional[datetime]
    time_out: Optional[datetime]

    @property
    def is_complete(self) -> bool:
        return self.time_in is not None and self.time_out is not None and self.time_out > self.time_in

    @property
    def anchor(self) -> datetime:
        return self.time_in if self.time_in is not None else self.time_out  # type: ignore[return-value]


@dataclass(frozen=True)
class DayClassification:
    """Kết quả phân loại phiên sáng/chiều của một ngày."""

    morning_in: Optional[datetime] = None
    morning_out: Optional[datetime] = None
    afternoon_in: Optional[datetime] = None
    afternoon_out: Optional[datetime] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    hours_worked: Optional[float] = None
    is_late: bool = False
    late_minutes: int = 0
    is_absent: bool = True
    is_half_day: bool = False
    is_early_out: bool = False
    total_sessions: int = 0
    session_type: Optional[SessionType] = None
    full_day_span: bool = False
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công theo ngày."""

    employee_id: int
    business_day: date
    morning_in: Optional[datetime] = None
    morning_out: Optional[datetime] = None
    afternoon_in: Optional[datetime] = None
    afternoon_out: Optional[datetime] = None
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    hours_worked: Optional[float] = None
    is_late: bool = False
    late_minutes: int = 0
    is_absent: bool = False
    is_half_day: bool = False
    is_early_out: bool = False
    total_sessions: int = 0
    session_type: Optional[SessionType] = None
    full_day_span: bool = False
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    import_batch_id: Optional[int] = None
    approved_by: Optional[int] = None
    rejection_reason: Optional[str] = None
    notes: Optional[str] = None
    attendance_id: Optional[int] = None

    @property
    def key(self) -> tuple[int, date]:
        return (self.employee_id, self.business_day)

    @property
    def has_human_decision(self) -> bool:
        return self.approved_by is not None or self.approval_status == ApprovalStatus.REJECTED


@dataclass(frozen=True)
class ImportBatch:
    """Một lần tải file chấm công (ghi một lần)."""

    batch_id: Optional[int]
    source_file_name: str
    source_size: int
    checksum: str
    uploaded_by: Optional[int]
    created_at: datetime
    summary: Optional[dict] = None


@dataclass(frozen=True)
class ImportRow:
    """One tabular row of a device export, as read (untrusted strings)."""

    row_number: int
    external_id: Optional[str]
    name: Optional[str]
    timestamp: Optional[str]
    status: Optional[str]
    location: Optional[str] = None
    department: Optional[str] = None


@dataclass(frozen=True)
class Diagnostic:
    row_number: Optional[int]
    message: str

    def __str__(self) -> str:
        if self.row_number is None:
            return self.message
        return f"Row {self.row_number}: {self.message}"


@dataclass
class ImportSummary:
    batch_id: Optional[int] = None
    checksum: str = ""
    repeat_of_batch_id: Optional[int] = None
    total_rows: int = 0
    punches: int = 0
    imported: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    absences: int = 0
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def is_repeat(self) -> bool:
        return self.repeat_of_batch_id is not None

    def as_dict(self) -> dict:
        return {
            "batchId": self.batch_id,
            "checksum": self.checksum,
            "repeatOfBatchId": self.repeat_of_batch_id,
            "total": self.total_rows,
            "punches": self.punches,
            "imported": self.imported,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "skipped": self.skipped,
            "absences": self.absences,
            "errors": [str(d) for d in self.errors],
            "warnings": [str(d) for d in self.warnings],
        }


@dataclass(frozen=True)
class PunchOutcome:
    accepted: bool
    reason: Optional[str]
    record: Optional[AttendanceRecord]
