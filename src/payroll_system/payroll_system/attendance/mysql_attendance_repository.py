from __future__ import annotations

from datetime import date
from typing import ContextManager, Iterable, Optional, Sequence

from ..common.datetime_utils import from_naive_utc, to_naive_utc
from ..core.enums import ApprovalStatus, SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, named_lock
from .model import AttendanceRecord
from .repository import AttendanceRepository

_TIME_FIELDS = ("morning_in", "morning_out", "afternoon_in", "afternoon_out", "time_in", "time_out")

_COLUMNS = (
    "employee_id",
    "business_day",
    *_TIME_FIELDS,
    "hours_worked",
    "is_late",
    "late_minutes",
    "is_absent",
    "is_half_day",
    "is_early_out",
    "total_sessions",
    "session_type",
    "full_day_span",
    "approval_status",
    "import_batch_id",
    "approved_by",
    "rejection_reason",
    "notes",
)

_SELECT = "SELECT attendance_id, " + ", ".join(_COLUMNS) + " FROM attendance_records"

# Everything but the unique key is refreshed on conflict.
_UPSERT = (
    "INSERT INTO attendance_records(" + ", ".join(_COLUMNS) + ") "
    "VALUES(" + ",".join(["%s"] * len(_COLUMNS)) + ") "
    "ON DUPLICATE KEY UPDATE " + ", ".join(f"{c}=VALUES({c})" for c in _COLUMNS[2:])
)


def _to_record(r: dict) -> AttendanceRecord:
    hours = r.get("hours_worked")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        business_day=r["business_day"],
        morning_in=from_naive_utc(r.get("morning_in")),
        morning_out=from_naive_utc(r.get("morning_out")),
        afternoon_in=from_naive_utc(r.get("afternoon_in")),
        afternoon_out=from_naive_utc(r.get("afternoon_out")),
        time_in=from_naive_utc(r.get("time_in")),
        time_out=from_naive_utc(r.get("time_out")),
        hours_worked=float(hours) if hours is not None else None,
        is_late=bool(r.get("is_late")),
        late_minutes=int(r.get("late_minutes") or 0),
        is_absent=bool(r.get("is_absent")),
        is_half_day=bool(r.get("is_half_day")),
        is_early_out=bool(r.get("is_early_out")),
        total_sessions=int(r.get("total_sessions") or 0),
        session_type=SessionType(r["session_type"]) if r.get("session_type") else None,
        full_day_span=bool(r.get("full_day_span")),
        approval_status=ApprovalStatus(r["approval_status"]),
        import_batch_id=r.get("import_batch_id"),
        approved_by=r.get("approved_by"),
        rejection_reason=r.get("rejection_reason"),
        notes=r.get("notes"),
    )


def _to_params(rec: AttendanceRecord) -> tuple:
    return (
        rec.employee_id,
        rec.business_day,
        *(to_naive_utc(getattr(rec, f)) for f in _TIME_FIELDS),
        rec.hours_worked,
        int(rec.is_late),
        int(rec.late_minutes),
        int(rec.is_absent),
        int(rec.is_half_day),
        int(rec.is_early_out),
        int(rec.total_sessions),
        rec.session_type.value if rec.session_type else None,
        int(rec.full_day_span),
        rec.approval_status.value,
        rec.import_batch_id,
        rec.approved_by,
        rec.rejection_reason,
        rec.notes,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_day(self, employee_id: int, business_day: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE employee_id=%s AND business_day=%s", (int(employee_id), business_day))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE employee_id=%s ORDER BY business_day DESC LIMIT %s",
                (int(employee_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_between(
        self, start: date, end: date, *, employee_ids: Optional[Iterable[int]] = None
    ) -> Sequence[AttendanceRecord]:
        sql = f"{_SELECT} WHERE business_day BETWEEN %s AND %s"
        params: list = [start, end]
        ids = [int(i) for i in employee_ids] if employee_ids is not None else None
        if ids is not None:
            if not ids:
                return []
            sql += " AND employee_id IN (" + ",".join(["%s"] * len(ids)) + ")"
            params.extend(ids)
        sql += " ORDER BY employee_id, business_day"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]

    def existing_keys(self, start: date, end: date) -> set[tuple[int, date]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT employee_id, business_day FROM attendance_records WHERE business_day BETWEEN %s AND %s",
                (start, end),
            )
            return {(int(r["employee_id"]), r["business_day"]) for r in fetchall(cur)}

    def upsert_many(self, records: Sequence[AttendanceRecord]) -> None:
        if not records:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(_UPSERT, [_to_params(r) for r in records])

    def update_approval(
        self,
        *,
        employee_id: int,
        business_day: date,
        status: ApprovalStatus,
        approved_by: Optional[int],
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET approval_status=%s, approved_by=%s, rejection_reason=%s
                WHERE employee_id=%s AND business_day=%s
                """,
                (status.value, approved_by, rejection_reason, int(employee_id), business_day),
            )
            return cur.rowcount > 0

    def lock_day(self, employee_id: int, business_day: date) -> ContextManager[None]:
        return named_lock(self._conn_factory, f"attendance:{int(employee_id)}:{business_day.isoformat()}")
