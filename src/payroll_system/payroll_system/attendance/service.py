from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.batching import chunked
from ..common.datetime_utils import business_day_of, day_bounds_utc, hours_between, local_clock, normalize_instant, now_utc
from ..common.validators import require_period
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import ApprovalStatus, PunchDirection
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..policy.model import AttendancePolicy
from ..work_calendar.service import WorkCalendar, working_days_between
from . import record_builder
from .classifier import classify_day
from .factory import ApprovalStrategyFactory
from .model import AttendanceRecord, Punch, PunchOutcome
from .repository import AttendanceRepository, PunchRepository
from .sequencer import build_sequences

logger = logging.getLogger(__name__)


def _parse_direction(value) -> PunchDirection:
    if isinstance(value, PunchDirection):
        return value
    try:
        return PunchDirection(str(value).strip().upper())
    except ValueError as e:
        raise ValidationError(f"Unknown punch direction {value!r}") from e


class AttendanceService:
    """Live time-clock actions and admin review of daily records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        punches: PunchRepository,
        employees: EmployeeRepository,
        work_calendar: WorkCalendar,
        policy: AttendancePolicy,
        *,
        strategy_factory: ApprovalStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._punches = punches
        self._employees = employees
        self._calendar = work_calendar
        self._policy = policy
        self._factory = strategy_factory or ApprovalStrategyFactory()

    def record_punch(self, employee_id: int, direction, *, now: datetime | None = None) -> PunchOutcome:
        direction = _parse_direction(direction)
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        tz = self._policy.reference_timezone
        normalized = normalize_instant(now or now_utc(), tz)
        day = normalized.business_day

        with self._attendance.lock_day(employee_id, day):
            start, end = day_bounds_utc(day, tz)
            day_punches = list(self._punches.list_between(start, end, employee_ids=[employee_id]))
            existing = self._attendance.get_for_day(employee_id, day)

            reason = self._rejection_reason(direction, normalized.instant, day_punches)
            if reason:
                logger.info("Rejected %s punch for employee %s on %s: %s", direction.value, employee_id, day, reason)
                return PunchOutcome(accepted=False, reason=reason, record=existing)

            punch = Punch(
                employee_id=employee_id,
                instant=normalized.instant,
                direction=direction,
                raw_status_text=direction.value,
            )
            self._punches.add_many([punch])

            classification = classify_day(build_sequences(day_punches + [punch]), self._policy)
            record = record_builder.merge_record(
                existing,
                classification,
                employee_id=employee_id,
                business_day=day,
                policy=self._policy,
                factory=self._factory,
            )
            self._attendance.upsert_many([record])

        return PunchOutcome(accepted=True, reason=None, record=self._attendance.get_for_day(employee_id, day) or record)

    def _rejection_reason(
        self, direction: PunchDirection, instant: datetime, day_punches: Sequence[Punch]
    ) -> Optional[str]:
        sequences = build_sequences(day_punches)
        last = sequences[-1] if sequences else None
        open_in = last.time_in if last is not None and last.time_out is None else None

        if direction == PunchDirection.OUT:
            if open_in is None:
                return "You have not timed in yet"
            return None

        if open_in is not None and self._policy.prevent_duplicate_entries:
            if hours_between(open_in, instant) < self._policy.duplicate_range_hours:
                at = local_clock(open_in, self._policy.reference_timezone).strftime("%H:%M")
                return f"Already timed in at {at}"
        return None

    def get_day(self, employee_id: int, business_day: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_day(employee_id, business_day)

    def history(
        self,
        employee_id: int,
        *,
        start: date | None = None,
        end: date | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        if start and end:
            require_period(start, end)
            return self._attendance.list_between(start, end, employee_ids=[employee_id])
        return self._attendance.get_recent_for_employee(employee_id, limit)

    def decide_approval(
        self,
        employee_id: int,
        business_day: date,
        *,
        action: str,
        reviewer_id: int,
        reason: str | None = None,
    ) -> AttendanceRecord:
        record = self._attendance.get_for_day(employee_id, business_day)
        if not record:
            raise NotFoundError("Attendance record not found")
        if record.approval_status != ApprovalStatus.PENDING:
            raise ConflictError(f"Attendance record is already {record.approval_status.value}")

        action = (action or "").strip().lower()
        if action == "approve":
            status, reason = ApprovalStatus.APPROVED, None
        elif action == "reject":
            if not reason or not reason.strip():
                raise ValidationError("A reason is required to reject attendance")
            status, reason = ApprovalStatus.REJECTED, reason.strip()
        else:
            raise ValidationError("Action must be 'approve' or 'reject'")

        self._attendance.update_approval(
            employee_id=employee_id,
            business_day=business_day,
            status=status,
            approved_by=reviewer_id,
            rejection_reason=reason,
        )
        logger.info("Attendance %s/%s %s by %s", employee_id, business_day, status.value, reviewer_id)
        return self._attendance.get_for_day(employee_id, business_day) or record

    def synthesize_absences(self, start: date, end: date, *, now: datetime | None = None) -> int:
        """Create absence records for working days in [start, end] without any record. Future days are skipped."""
        require_period(start, end)
        today = business_day_of(now or now_utc(), self._policy.reference_timezone)
        end = min(end, today)
        if end < start:
            return 0

        working_days = working_days_between(self._calendar, start, end)
        employee_ids = [e.employee_id for e in self._employees.list_active()]
        existing = self._attendance.existing_keys(start, end)
        absences = record_builder.synthesize_absences(employee_ids, working_days, set(), existing)

        for chunk in chunked(absences, self._policy.import_chunk_size):
            self._attendance.upsert_many(chunk)
        logger.info("Synthesized %s absence records for %s..%s", len(absences), start, end)
        return len(absences)
