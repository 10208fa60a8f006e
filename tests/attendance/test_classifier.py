from dataclasses import replace
from datetime import date

import pytest

from src.payroll_system.payroll_system.attendance.classifier import classify_day, natural_slot
from src.payroll_system.payroll_system.attendance.model import Punch, PunchSequence
from src.payroll_system.payroll_system.attendance.sequencer import build_sequences
from src.payroll_system.payroll_system.core.enums import PunchDirection, SessionSlot, SessionType

from tests.fakes import at

DAY = date(2025, 10, 15)


def _classify(policy, *pairs):
    punches = []
    for hhmm, direction in pairs:
        punches.append(Punch(employee_id=1, instant=at(DAY, hhmm), direction=PunchDirection(direction)))
    return classify_day(build_sequences(punches), policy)


def test_single_in_out_spanning_lunch_is_a_full_day(policy):
    day = _classify(policy, ("07:55", "IN"), ("17:05", "OUT"))

    assert day.full_day_span
    assert day.total_sessions == 2
    assert day.session_type == SessionType.FULL_DAY
    assert day.hours_worked == pytest.approx(9.17)
    assert day.morning_in == at(DAY, "07:55")
    assert day.afternoon_out == at(DAY, "17:05")
    assert not day.is_late
    assert not day.is_absent
    assert not day.is_half_day
    assert not day.is_early_out


def test_four_punch_day_fills_both_sessions(policy):
    day = _classify(policy, ("07:50", "IN"), ("12:00", "OUT"), ("13:00", "IN"), ("17:00", "OUT"))

    assert not day.full_day_span
    assert day.total_sessions == 2
    assert day.morning_out == at(DAY, "12:00")
    assert day.afternoon_in == at(DAY, "13:00")
    assert day.hours_worked == pytest.approx(8.17)
    assert day.time_in == at(DAY, "07:50")
    assert day.time_out == at(DAY, "17:00")


def test_arrival_at_grace_boundary_is_not_late(policy):
    day = _classify(policy, ("08:15", "IN"), ("17:00", "OUT"))
    assert not day.is_late
    assert day.late_minutes == 0


def test_arrival_after_grace_counts_minutes_from_window_start(policy):
    day = _classify(policy, ("08:16", "IN"), ("17:00", "OUT"))
    assert day.is_late
    assert day.late_minutes == 16


def test_grace_comes_from_policy(policy):
    strict = replace(policy, late_grace_minutes=0)
    day = _classify(strict, ("08:01", "IN"), ("17:00", "OUT"))
    assert day.is_late
    assert day.late_minutes == 1


def test_morning_only_session_is_half_day(policy):
    day = _classify(policy, ("07:58", "IN"), ("12:30", "OUT"))

    assert day.is_half_day
    assert day.total_sessions == 1
    assert day.session_type == SessionType.HALF_DAY
    assert day.hours_worked == pytest.approx(4.53)
    assert day.is_early_out
    assert not day.is_absent
    assert day.warnings == ()


def test_short_half_day_warns(policy):
    day = _classify(policy, ("08:00", "IN"), ("10:00", "OUT"))
    assert day.is_half_day
    assert any("below" in w for w in day.warnings)


def test_missing_out_marks_absent(policy):
    day = _classify(policy, ("08:00", "IN"))

    assert day.is_absent
    assert day.total_sessions == 1
    assert day.time_out is None
    assert day.hours_worked == 0.0


def test_extra_sequences_are_reported_not_dropped_silently(policy):
    day = _classify(
        policy,
        ("08:00", "IN"),
        ("10:00", "OUT"),
        ("10:30", "IN"),
        ("12:00", "OUT"),
        ("13:00", "IN"),
        ("17:00", "OUT"),
    )

    assert day.total_sessions == 2
    assert any(w.startswith("Ignored extra punch sequence 13:00-17:00") for w in day.warnings)


def test_full_day_rule_can_be_disabled(policy):
    day = _classify(replace(policy, first_sequence_full_day=False), ("07:55", "IN"), ("17:05", "OUT"))
    assert not day.full_day_span
    assert day.total_sessions == 1
    assert day.morning_out == at(DAY, "17:05")


def test_lunch_gap_in_is_afternoon_by_default(policy):
    seq = PunchSequence(time_in=at(DAY, "12:30"), time_out=None)
    assert natural_slot(seq, policy) == SessionSlot.AFTERNOON
    assert natural_slot(seq, replace(policy, lunch_gap_is_afternoon=False)) == SessionSlot.MORNING


def test_out_only_sequence_slots_by_out_time(policy):
    assert natural_slot(PunchSequence(None, at(DAY, "11:00")), policy) == SessionSlot.MORNING
    assert natural_slot(PunchSequence(None, at(DAY, "17:00")), policy) == SessionSlot.AFTERNOON


def test_empty_day_has_no_sessions(policy):
    day = classify_day([], policy)
    assert day.total_sessions == 0
    assert day.is_absent
    assert day.hours_worked is None
    assert day.session_type is None
