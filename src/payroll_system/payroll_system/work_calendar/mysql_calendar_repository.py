from __future__ import annotations

import json
from typing import Optional, Sequence

from ..core.enums import HolidayType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CalendarOverride, Holiday
from .repository import CalendarRepository


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_holidays(self) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT holiday_date, name, holiday_type, is_recurring FROM holidays ORDER BY holiday_date")
            return [
                Holiday(
                    holiday_date=r["holiday_date"],
                    name=r["name"],
                    holiday_type=HolidayType(r["holiday_type"]),
                    is_recurring=bool(r.get("is_recurring")),
                )
                for r in fetchall(cur)
            ]

    def get_override(self, *, year: int, month: int) -> Optional[CalendarOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT no_work_days, working_weekend_days
                FROM work_calendar_overrides
                WHERE year=%s AND month=%s
                """,
                (int(year), int(month)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return CalendarOverride(
                year=int(year),
                month=int(month),
                no_work_days=tuple(int(d) for d in json.loads(r.get("no_work_days") or "[]")),
                working_weekend_days=tuple(int(d) for d in json.loads(r.get("working_weekend_days") or "[]")),
            )
