"""Morning/afternoon session classification for one employee-day.

Input is the ordered sequence list produced by ``build_sequences``. Every
window and threshold comes from the ``AttendancePolicy`` passed in; clock
comparisons are made on reference-local wall time.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import hours_between, local_clock, to_local
from ..core.constants import HOURS_PRECISION
from ..core.enums import SessionSlot, SessionType
from ..policy.model import AttendancePolicy
from .model import DayClassification, PunchSequence


@dataclass(frozen=True)
class DaySlots:
    morning_in: Optional[datetime] = None
    morning_out: Optional[datetime] = None
    afternoon_in: Optional[datetime] = None
    afternoon_out: Optional[datetime] = None
    full_day_span: bool = False

    def is_free(self, slot: SessionSlot) -> bool:
        if self.full_day_span:
            return False
        if slot == SessionSlot.MORNING:
            return self.morning_in is None and self.morning_out is None
        return self.afternoon_in is None and self.afternoon_out is None

    def fill(self, slot: SessionSlot, seq: PunchSequence) -> "DaySlots":
        if slot == SessionSlot.MORNING:
            return replace(self, morning_in=seq.time_in, morning_out=seq.time_out)
        return replace(self, afternoon_in=seq.time_in, afternoon_out=seq.time_out)


def _fmt(instant: Optional[datetime], policy: AttendancePolicy) -> str:
    if instant is None:
        return "--:--"
    return local_clock(instant, policy.reference_timezone).strftime("%H:%M")


def natural_slot(seq: PunchSequence, policy: AttendancePolicy) -> SessionSlot:
    """Slot a sequence belongs to by its own clock times."""
    tz = policy.reference_timezone
    if seq.time_in is None:
        out_clock = local_clock(seq.time_out, tz)  # type: ignore[arg-type]
        return SessionSlot.MORNING if out_clock < policy.afternoon_start else SessionSlot.AFTERNOON

    in_clock = local_clock(seq.time_in, tz)
    if in_clock < policy.noon_cutoff:
        return SessionSlot.MORNING
    if in_clock >= policy.afternoon_start:
        return SessionSlot.AFTERNOON
    # 12:00-12:59 lunch gap
    return SessionSlot.AFTERNOON if policy.lunch_gap_is_afternoon else SessionSlot.MORNING


def _is_full_day_span(seq: PunchSequence, policy: AttendancePolicy) -> bool:
    if not seq.is_complete:
        return False
    tz = policy.reference_timezone
    return (
        local_clock(seq.time_in, tz) < policy.noon_cutoff  # type: ignore[arg-type]
        and local_clock(seq.time_out, tz) >= policy.afternoon_start  # type: ignore[arg-type]
    )


def assign_slots(sequences: Sequence[PunchSequence], policy: AttendancePolicy) -> tuple[DaySlots, list[str]]:
    slots = DaySlots()
    warnings: list[str] = []

    for index, seq in enumerate(sequences):
        if index == 0 and policy.first_sequence_full_day and _is_full_day_span(seq, policy):
            slots = DaySlots(morning_in=seq.time_in, afternoon_out=seq.time_out, full_day_span=True)
            continue

        if index >= 2:
            warnings.append(
                f"Ignored extra punch sequence {_fmt(seq.time_in, policy)}-{_fmt(seq.time_out, policy)}"
            )
            continue

        preferred = natural_slot(seq, policy)
        other = SessionSlot.AFTERNOON if preferred == SessionSlot.MORNING else SessionSlot.MORNING
        if slots.is_free(preferred):
            slots = slots.fill(preferred, seq)
        elif slots.is_free(other):
            slots = slots.fill(other, seq)
        else:
            warnings.append(
                f"No free session for punch sequence {_fmt(seq.time_in, policy)}-{_fmt(seq.time_out, policy)}"
            )

    return slots, warnings


def _span_hours(start: Optional[datetime], end: Optional[datetime]) -> float:
    if start is None or end is None or end <= start:
        return 0.0
    return hours_between(start, end)


def summarize_slots(slots: DaySlots, policy: AttendancePolicy, warnings: Sequence[str] = ()) -> DayClassification:
    """Derive times, hours and flags from filled slots."""
    tz = policy.reference_timezone

    if slots.full_day_span:
        total_sessions = 2
        hours = _span_hours(slots.morning_in, slots.afternoon_out)
    else:
        has_morning = slots.morning_in is not None or slots.morning_out is not None
        has_afternoon = slots.afternoon_in is not None or slots.afternoon_out is not None
        total_sessions = int(has_morning) + int(has_afternoon)
        hours = _span_hours(slots.morning_in, slots.morning_out) + _span_hours(slots.afternoon_in, slots.afternoon_out)

    time_in = slots.morning_in or slots.afternoon_in
    time_out = slots.afternoon_out or slots.morning_out
    is_absent = time_in is None or time_out is None or time_out <= time_in

    is_late = False
    late_minutes = 0
    if slots.morning_in is not None:
        local_in = to_local(slots.morning_in, tz)
        window_start = local_in.replace(
            hour=policy.morning_start.hour, minute=policy.morning_start.minute, second=0, microsecond=0
        )
        if local_in > window_start + timedelta(minutes=policy.late_grace_minutes):
            is_late = True
            late_minutes = int((local_in - window_start).total_seconds() // 60)

    out_warnings = list(warnings)
    is_half_day = False
    if total_sessions == 1:
        single_out = slots.morning_out or slots.afternoon_out
        if single_out is not None and local_clock(single_out, tz) < policy.end_of_day_cutoff:
            is_half_day = True
            if hours < policy.half_day_minimum_hours:
                out_warnings.append(
                    f"Half-day session of {hours:.2f}h is below the {policy.half_day_minimum_hours:g}h minimum"
                )

    is_early_out = time_out is not None and local_clock(time_out, tz) < policy.end_of_day_cutoff

    if total_sessions >= 2:
        session_type: Optional[SessionType] = SessionType.FULL_DAY
    elif total_sessions == 1:
        session_type = SessionType.HALF_DAY
    else:
        session_type = None

    return DayClassification(
        morning_in=slots.morning_in,
        morning_out=slots.morning_out,
        afternoon_in=slots.afternoon_in,
        afternoon_out=slots.afternoon_out,
        time_in=time_in,
        time_out=time_out,
        hours_worked=round(hours, HOURS_PRECISION) if total_sessions else None,
        is_late=is_late,
        late_minutes=late_minutes,
        is_absent=is_absent,
        is_half_day=is_half_day,
        is_early_out=is_early_out,
        total_sessions=total_sessions,
        session_type=session_type,
        full_day_span=slots.full_day_span,
        warnings=tuple(out_warnings),
    )


def classify_day(sequences: Sequence[PunchSequence], policy: AttendancePolicy) -> DayClassification:
    slots, warnings = assign_slots(sequences, policy)
    return summarize_slots(slots, policy, warnings)
