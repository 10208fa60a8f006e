from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest

from src.payroll_system.payroll_system.core.enums import ApprovalStatus, PunchDirection, SessionType
from src.payroll_system.payroll_system.core.exceptions import ConflictError, NotFoundError, ValidationError

from tests.fakes import at

DAY = date(2025, 10, 15)


def test_time_in_then_out_builds_a_full_day(attendance_service, attendance_repo):
    first = attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))
    assert first.accepted
    assert first.record.is_absent
    assert first.record.approval_status == ApprovalStatus.PENDING

    second = attendance_service.record_punch(1, PunchDirection.OUT, now=at(DAY, "17:00"))

    assert second.accepted
    rec = attendance_repo.get_for_day(1, DAY)
    assert rec.session_type == SessionType.FULL_DAY
    assert rec.hours_worked == 9.0
    assert not rec.is_absent
    assert rec.approval_status == ApprovalStatus.APPROVED


def test_duplicate_time_in_is_rejected(attendance_service, punches_repo):
    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))

    outcome = attendance_service.record_punch(1, "IN", now=at(DAY, "08:20"))

    assert not outcome.accepted
    assert outcome.reason == "Already timed in at 08:00"
    assert len(punches_repo.all()) == 1


def test_time_in_outside_duplicate_range_is_accepted(attendance_service, punches_repo):
    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))
    outcome = attendance_service.record_punch(1, "IN", now=at(DAY, "09:30"))

    assert outcome.accepted
    assert len(punches_repo.all()) == 2


def test_time_out_without_time_in_is_rejected(attendance_service, attendance_repo):
    outcome = attendance_service.record_punch(1, "OUT", now=at(DAY, "17:00"))

    assert not outcome.accepted
    assert outcome.reason == "You have not timed in yet"
    assert attendance_repo.get_for_day(1, DAY) is None


def test_second_time_out_is_rejected(attendance_service):
    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))
    attendance_service.record_punch(1, "OUT", now=at(DAY, "12:00"))

    assert not attendance_service.record_punch(1, "OUT", now=at(DAY, "12:05")).accepted


def test_unknown_employee_and_direction(attendance_service):
    with pytest.raises(NotFoundError):
        attendance_service.record_punch(99, "IN", now=at(DAY, "08:00"))
    with pytest.raises(ValidationError):
        attendance_service.record_punch(1, "LUNCH", now=at(DAY, "08:00"))


def test_concurrent_time_ins_are_serialized(attendance_service, punches_repo):
    instants = [at(DAY, f"08:0{i}") for i in range(5)]
    with ThreadPoolExecutor(max_workers=5) as pool:
        outcomes = list(pool.map(lambda now: attendance_service.record_punch(1, "IN", now=now), instants))

    assert sum(o.accepted for o in outcomes) == 1
    assert len(punches_repo.all()) == 1


def test_reject_requires_reason_and_happens_once(attendance_service, attendance_repo):
    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))

    with pytest.raises(ValidationError):
        attendance_service.decide_approval(1, DAY, action="reject", reviewer_id=7, reason="  ")

    rec = attendance_service.decide_approval(1, DAY, action="reject", reviewer_id=7, reason="No time out")
    assert rec.approval_status == ApprovalStatus.REJECTED
    assert rec.approved_by == 7
    assert rec.rejection_reason == "No time out"

    with pytest.raises(ConflictError):
        attendance_service.decide_approval(1, DAY, action="approve", reviewer_id=7)


def test_decision_on_missing_record(attendance_service):
    with pytest.raises(NotFoundError):
        attendance_service.decide_approval(1, DAY, action="approve", reviewer_id=7)


def test_rejected_day_keeps_status_after_new_punch(attendance_service, attendance_repo):
    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))
    attendance_service.decide_approval(1, DAY, action="reject", reviewer_id=7, reason="Suspicious")

    attendance_service.record_punch(1, "OUT", now=at(DAY, "17:00"))

    rec = attendance_repo.get_for_day(1, DAY)
    assert rec.approval_status == ApprovalStatus.REJECTED
    assert rec.time_out == at(DAY, "17:00")


def test_absence_synthesis_skips_existing_records_and_future_days(attendance_service, attendance_repo):
    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))

    created = attendance_service.synthesize_absences(
        date(2025, 10, 13), date(2025, 10, 19), now=at(date(2025, 10, 17), "12:00")
    )

    # Mon..Fri for two employees, minus employee 1 on Wednesday.
    assert created == 9
    assert attendance_repo.get_for_day(1, DAY).time_in == at(DAY, "08:00")
    assert attendance_repo.get_for_day(2, date(2025, 10, 18)) is None

    again = attendance_service.synthesize_absences(
        date(2025, 10, 13), date(2025, 10, 19), now=at(date(2025, 10, 17), "12:00")
    )
    assert again == 0


def test_history_by_period(attendance_service):
    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))
    attendance_service.record_punch(1, "IN", now=at(date(2025, 10, 16), "08:00"))

    rows = attendance_service.history(1, start=DAY, end=DAY)
    assert [r.business_day for r in rows] == [DAY]
    assert len(attendance_service.history(1)) == 2


def test_get_day_returns_the_stored_record(attendance_service):
    assert attendance_service.get_day(1, DAY) is None

    attendance_service.record_punch(1, "IN", now=at(DAY, "08:00"))

    rec = attendance_service.get_day(1, DAY)
    assert rec is not None
    assert rec.business_day == DAY
