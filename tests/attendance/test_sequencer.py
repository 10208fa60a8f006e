from datetime import date

from src.payroll_system.payroll_system.attendance.model import Punch
from src.payroll_system.payroll_system.attendance.sequencer import build_sequences
from src.payroll_system.payroll_system.core.enums import PunchDirection

from tests.fakes import at

DAY = date(2025, 10, 15)
IN, OUT = PunchDirection.IN, PunchDirection.OUT


def _punch(hhmm: str, direction: PunchDirection) -> Punch:
    return Punch(employee_id=1, instant=at(DAY, hhmm), direction=direction)


def _count(sequences) -> int:
    return sum((s.time_in is not None) + (s.time_out is not None) for s in sequences)


def test_pairs_in_out_in_order_regardless_of_input_order():
    punches = [_punch("17:00", OUT), _punch("13:00", IN), _punch("12:00", OUT), _punch("08:00", IN)]

    seqs = build_sequences(punches)

    assert [(s.time_in, s.time_out) for s in seqs] == [
        (at(DAY, "08:00"), at(DAY, "12:00")),
        (at(DAY, "13:00"), at(DAY, "17:00")),
    ]


def test_unpaired_punches_are_kept_as_one_sided_sequences():
    punches = [
        _punch("07:00", OUT),
        _punch("08:00", IN),
        _punch("08:30", IN),
        _punch("12:00", OUT),
        _punch("13:00", IN),
    ]

    seqs = build_sequences(punches)

    assert [(s.time_in, s.time_out) for s in seqs] == [
        (None, at(DAY, "07:00")),
        (at(DAY, "08:00"), None),
        (at(DAY, "08:30"), at(DAY, "12:00")),
        (at(DAY, "13:00"), None),
    ]


def test_no_punch_is_dropped():
    hhmm = ["07:10", "07:15", "09:00", "11:59", "12:01", "12:30", "16:00", "18:45", "19:00"]
    dirs = [IN, OUT, OUT, IN, IN, OUT, IN, IN, OUT]
    punches = [_punch(t, d) for t, d in zip(hhmm, dirs)]

    assert _count(build_sequences(punches)) == len(punches)


def test_in_sorts_before_out_on_identical_instant():
    seqs = build_sequences([_punch("08:00", OUT), _punch("08:00", IN)])
    assert len(seqs) == 1
    assert seqs[0].time_in == seqs[0].time_out == at(DAY, "08:00")
    assert not seqs[0].is_complete


def test_empty_input():
    assert build_sequences([]) == []
