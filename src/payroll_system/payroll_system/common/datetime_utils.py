"""Timestamp normalization.

Every punch, whether it comes from a live clock action or from a device export,
goes through this module exactly once. The result carries the absolute instant
(aware, UTC) and the business day key computed in the single reference
timezone, so day boundaries never depend on the server's local time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import TimestampParseError, ValidationError

# DD/MM/YYYY HH:MM[:SS], anything after the time is device noise.
_DEVICE_TS = re.compile(
    r"^\s*(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{4})"
    r"\s+(?P<hour>\d{1,2}):(?P<minute>\d{1,2})(?::(?P<second>\d{1,2}))?"
)


@dataclass(frozen=True)
class NormalizedInstant:
    instant: datetime
    local: datetime
    business_day: date


@lru_cache(maxsize=None)
def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {name!r}") from e


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (AttributeError, ValueError) as e:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from e


def parse_hhmm(value: str | time) -> time:
    if isinstance(value, time):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").time()
    except ValueError as e:
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM") from e


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def normalize_instant(value: datetime, tz_name: str) -> NormalizedInstant:
    """Normalize any datetime. Naive values are read as reference-local time."""
    zone = get_zone(tz_name)
    if value.tzinfo is None:
        local = value.replace(tzinfo=zone)
    else:
        local = value.astimezone(zone)
    instant = local.astimezone(timezone.utc)
    return NormalizedInstant(instant=instant, local=local, business_day=local.date())


def from_local_parts(day: date, clock_time: time, tz_name: str) -> NormalizedInstant:
    """Civil date + wall-clock time in the reference timezone -> instant."""
    return normalize_instant(datetime.combine(day, clock_time.replace(tzinfo=None)), tz_name)


def parse_device_timestamp(text: str, tz_name: str) -> NormalizedInstant:
    """Parse a biometric export timestamp such as ``15/10/2025 07:55 (C/In)``."""
    if text is None:
        raise TimestampParseError("Missing timestamp")
    m = _DEVICE_TS.match(str(text))
    if not m:
        raise TimestampParseError(f"Unrecognized timestamp {text!r}, expected DD/MM/YYYY HH:MM")

    day, month, year = int(m["day"]), int(m["month"]), int(m["year"])
    hour, minute = int(m["hour"]), int(m["minute"])
    second = int(m["second"]) if m["second"] else 0

    if not 1 <= month <= 12:
        raise TimestampParseError(f"Invalid month {month} in {text!r}")
    if hour > 23 or minute > 59 or second > 59:
        raise TimestampParseError(f"Invalid time of day in {text!r}")
    try:
        civil = date(year, month, day)
    except ValueError as e:
        raise TimestampParseError(f"Invalid calendar date in {text!r}") from e

    return from_local_parts(civil, time(hour, minute, second), tz_name)


def business_day_of(instant: datetime, tz_name: str) -> date:
    return normalize_instant(instant, tz_name).business_day


def to_local(instant: datetime, tz_name: str) -> datetime:
    return normalize_instant(instant, tz_name).local


def local_clock(instant: datetime, tz_name: str) -> time:
    return to_local(instant, tz_name).time().replace(tzinfo=None)


def day_bounds_utc(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """[start, end) of a business day as UTC instants."""
    start = from_local_parts(day, time(0, 0), tz_name).instant
    end = from_local_parts(day + timedelta(days=1), time(0, 0), tz_name).instant
    return start, end


def iter_days(start: date, end: date):
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def to_naive_utc(value: datetime | None) -> datetime | None:
    """MySQL DATETIME columns store naive UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_naive_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
