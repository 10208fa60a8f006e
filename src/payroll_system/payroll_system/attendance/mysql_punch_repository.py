from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import from_naive_utc, to_naive_utc
from ..core.enums import PunchDirection
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Punch
from .repository import PunchRepository


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_between(
        self, start: datetime, end: datetime, *, employee_ids: Optional[Iterable[int]] = None
    ) -> Sequence[Punch]:
        sql = """
            SELECT employee_id, punched_at, direction, raw_status_text,
                   source_location, source_department, import_batch_id
            FROM punches
            WHERE punched_at >= %s AND punched_at < %s
        """
        params: list = [to_naive_utc(start), to_naive_utc(end)]
        ids = [int(i) for i in employee_ids] if employee_ids is not None else None
        if ids is not None:
            if not ids:
                return []
            sql += " AND employee_id IN (" + ",".join(["%s"] * len(ids)) + ")"
            params.extend(ids)
        sql += " ORDER BY employee_id, punched_at"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                Punch(
                    employee_id=int(r["employee_id"]),
                    instant=from_naive_utc(r["punched_at"]),
                    direction=PunchDirection(r["direction"]),
                    raw_status_text=r.get("raw_status_text") or "",
                    source_location=r.get("source_location"),
                    source_department=r.get("source_department"),
                    import_batch_id=r.get("import_batch_id"),
                )
                for r in fetchall(cur)
            ]

    def add_many(self, punches: Sequence[Punch]) -> int:
        if not punches:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_punch(employee_id, punched_at, direction)
            cur.executemany(
                """
                INSERT IGNORE INTO punches(
                    employee_id, punched_at, direction, raw_status_text,
                    source_location, source_department, import_batch_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        p.employee_id,
                        to_naive_utc(p.instant),
                        p.direction.value,
                        p.raw_status_text,
                        p.source_location,
                        p.source_department,
                        p.import_batch_id,
                    )
                    for p in punches
                ],
            )
            return max(int(cur.rowcount or 0), 0)
