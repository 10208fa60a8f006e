from datetime import date

from src.payroll_system.payroll_system.attendance.factory import ApprovalStrategyFactory
from src.payroll_system.payroll_system.attendance.model import AttendanceRecord
from src.payroll_system.payroll_system.attendance.record_builder import classify_approval
from src.payroll_system.payroll_system.attendance.strategies.auto_approve_strategy import AutoApproveStrategy
from src.payroll_system.payroll_system.attendance.strategies.pending_review_strategy import PendingReviewStrategy
from src.payroll_system.payroll_system.core.enums import ApprovalStatus

from tests.fakes import at

DAY = date(2025, 10, 15)


def _record(**kw) -> AttendanceRecord:
    base = dict(
        employee_id=1,
        business_day=DAY,
        time_in=at(DAY, "08:00"),
        time_out=at(DAY, "17:00"),
        total_sessions=2,
    )
    base.update(kw)
    return AttendanceRecord(**base)


def test_complete_day_is_auto_approved(policy):
    strategy = ApprovalStrategyFactory().for_record(record=_record(), policy=policy)
    assert isinstance(strategy, AutoApproveStrategy)
    assert classify_approval(_record(), policy) == ApprovalStatus.APPROVED


def test_incomplete_day_waits_for_review(policy):
    record = _record(time_out=None)
    strategy = ApprovalStrategyFactory().for_record(record=record, policy=policy)

    assert isinstance(strategy, PendingReviewStrategy)
    decision = strategy.decide(record=record, policy=policy)
    assert decision.status == ApprovalStatus.PENDING
    assert decision.note == "Incomplete punches"


def test_lateness_within_threshold_is_auto_approved(policy):
    assert classify_approval(_record(is_late=True, late_minutes=120), policy) == ApprovalStatus.APPROVED


def test_lateness_beyond_threshold_waits_for_review(policy):
    assert classify_approval(_record(is_late=True, late_minutes=121), policy) == ApprovalStatus.PENDING


def test_day_without_sessions_is_auto_approved(policy):
    record = _record(time_in=None, time_out=None, total_sessions=0, is_absent=True)
    assert classify_approval(record, policy) == ApprovalStatus.APPROVED


def test_classifier_never_rejects(policy):
    records = [
        _record(),
        _record(time_in=None),
        _record(late_minutes=600, is_late=True),
        _record(total_sessions=0, time_in=None, time_out=None),
    ]
    assert all(classify_approval(r, policy) != ApprovalStatus.REJECTED for r in records)
