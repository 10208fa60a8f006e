from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Set

from ..core.enums import ApprovalStatus
from ..policy.model import AttendancePolicy
from .classifier import DaySlots, summarize_slots
from .factory import ApprovalStrategyFactory
from .model import AttendanceRecord, DayClassification
from .strategies.base import ApprovalDecision

_FACTORY = ApprovalStrategyFactory()


def _approval_decision(
    record: AttendanceRecord, policy: AttendancePolicy, factory: Optional[ApprovalStrategyFactory] = None
) -> ApprovalDecision:
    factory = factory or _FACTORY
    strategy = factory.for_record(record=record, policy=policy)
    return strategy.decide(record=record, policy=policy)


def classify_approval(
    record: AttendanceRecord, policy: AttendancePolicy, factory: Optional[ApprovalStrategyFactory] = None
) -> ApprovalStatus:
    """APPROVED or PENDING. Never REJECTED: rejection is always a human decision."""
    return _approval_decision(record, policy, factory).status


def _slots_of(item) -> DaySlots:
    return DaySlots(
        morning_in=item.morning_in,
        morning_out=item.morning_out,
        afternoon_in=item.afternoon_in,
        afternoon_out=item.afternoon_out,
        full_day_span=item.full_day_span,
    )


def _merge_slots(existing: Optional[AttendanceRecord], classification: DayClassification) -> DaySlots:
    if existing is None:
        return _slots_of(classification)
    if classification.total_sessions == 0:
        return _slots_of(existing)
    # The classification already covers every punch of the day.
    return _slots_of(classification)


def merge_record(
    existing: Optional[AttendanceRecord],
    classification: DayClassification,
    *,
    employee_id: int,
    business_day: date,
    policy: AttendancePolicy,
    import_batch_id: Optional[int] = None,
    factory: Optional[ApprovalStrategyFactory] = None,
) -> AttendanceRecord:
    """Create or update the (employee, business_day) record.

    ``classification`` must be built from all of the day's punches; its slots
    replace the stored ones. A classification with no sessions keeps the stored
    slots. Derived flags are recomputed. A human approval decision on
    ``existing`` is never overwritten.
    """
    day = summarize_slots(_merge_slots(existing, classification), policy, classification.warnings)

    base = existing or AttendanceRecord(employee_id=employee_id, business_day=business_day)
    merged = replace(
        base,
        morning_in=day.morning_in,
        morning_out=day.morning_out,
        afternoon_in=day.afternoon_in,
        afternoon_out=day.afternoon_out,
        time_in=day.time_in,
        time_out=day.time_out,
        hours_worked=day.hours_worked,
        is_late=day.is_late,
        late_minutes=day.late_minutes,
        is_absent=day.is_absent,
        is_half_day=day.is_half_day,
        is_early_out=day.is_early_out,
        total_sessions=day.total_sessions,
        session_type=day.session_type,
        full_day_span=day.full_day_span,
        import_batch_id=import_batch_id if import_batch_id is not None else base.import_batch_id,
    )

    if existing is not None and existing.has_human_decision:
        return merged

    decision = _approval_decision(merged, policy, factory)
    return replace(merged, approval_status=decision.status, notes=decision.note)


def records_equal(a: AttendanceRecord, b: AttendanceRecord) -> bool:
    """Content equality, ignoring the storage id and batch provenance."""
    return replace(a, attendance_id=None, import_batch_id=None) == replace(b, attendance_id=None, import_batch_id=None)


def synthesize_absences(
    employee_ids: Iterable[int],
    working_days: Iterable[date],
    present_keys: Set[tuple[int, date]],
    existing_keys: Set[tuple[int, date]],
    *,
    import_batch_id: Optional[int] = None,
) -> list[AttendanceRecord]:
    """One absence per (employee, working day) with neither punches nor a stored record."""
    days = sorted(set(working_days))
    seen: set[tuple[int, date]] = set()
    out: list[AttendanceRecord] = []
    for employee_id in employee_ids:
        for day in days:
            key = (employee_id, day)
            if key in present_keys or key in existing_keys or key in seen:
                continue
            seen.add(key)
            out.append(
                AttendanceRecord(
                    employee_id=employee_id,
                    business_day=day,
                    is_absent=True,
                    total_sessions=0,
                    approval_status=ApprovalStatus.APPROVED,
                    import_batch_id=import_batch_id,
                )
            )
    return out
