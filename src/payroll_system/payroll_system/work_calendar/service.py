from __future__ import annotations

import calendar
from datetime import date
from typing import Protocol

from ..common.datetime_utils import iter_days
from ..core.enums import HolidayType
from .model import Holiday
from .repository import CalendarRepository


class WorkCalendar(Protocol):
    """Collaborator contract used by the attendance and payroll engines."""

    def get_working_days(self, year: int, month: int) -> set[date]:
        raise NotImplementedError

    def holidays_between(self, start: date, end: date) -> dict[date, HolidayType]:
        raise NotImplementedError


def _holiday_on(h: Holiday, year: int) -> date | None:
    if not h.is_recurring:
        return h.holiday_date
    try:
        return h.holiday_date.replace(year=year)
    except ValueError:
        # Feb 29 recurring holiday in a non-leap year
        return None


class WorkCalendarService(WorkCalendar):
    """Weekdays minus holidays and no-work days, plus working weekends."""

    def __init__(self, calendar_repo: CalendarRepository):
        self._repo = calendar_repo

    def holidays_between(self, start: date, end: date) -> dict[date, HolidayType]:
        out: dict[date, HolidayType] = {}
        holidays = list(self._repo.list_holidays())
        for year in range(start.year, end.year + 1):
            for h in holidays:
                d = _holiday_on(h, year)
                if d is not None and start <= d <= end:
                    # REGULAR wins when two holidays share a date
                    if out.get(d) != HolidayType.REGULAR:
                        out[d] = h.holiday_type
        return out

    def get_working_days(self, year: int, month: int) -> set[date]:
        last = calendar.monthrange(year, month)[1]
        start, end = date(year, month, 1), date(year, month, last)
        holidays = self.holidays_between(start, end)
        override = self._repo.get_override(year=year, month=month)
        no_work = set(override.no_work_days) if override else set()
        weekend_work = set(override.working_weekend_days) if override else set()

        days: set[date] = set()
        for d in iter_days(start, end):
            weekend = d.weekday() >= 5
            if weekend:
                if d.day in weekend_work:
                    days.add(d)
            elif d not in holidays and d.day not in no_work:
                days.add(d)
        return days


def working_days_between(work_calendar: WorkCalendar, start: date, end: date) -> set[date]:
    """Working days in [start, end], fetched month by month from the collaborator."""
    days: set[date] = set()
    y, m = start.year, start.month
    while (y, m) <= (end.year, end.month):
        days.update(d for d in work_calendar.get_working_days(y, m) if start <= d <= end)
        m += 1
        if m > 12:
            y, m = y + 1, 1
    return days
