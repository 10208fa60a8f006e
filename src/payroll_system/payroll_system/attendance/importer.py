"""Bulk import of biometric device exports.

One call handles one uploaded file end to end: rows are read with pandas,
every row is normalized and resolved independently (a bad row becomes a
diagnostic, never an exception), punches are grouped per employee-day and
reconciled against what is already stored, absences are synthesized for the
covered working days, and everything is written back in sequential chunks of
upserts so a failed chunk can simply be retried.
"""

from __future__ import annotations

import hashlib
import io
import json
import logging
import os
import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

import pandas as pd

from ..common.batching import chunked
from ..common.datetime_utils import business_day_of, day_bounds_utc, now_utc, parse_device_timestamp
from ..common.validators import clean_cell
from ..core.constants import DEFAULT_IMPORT_HISTORY_LIMIT
from ..core.enums import PunchDirection
from ..core.exceptions import TimestampParseError, ValidationError
from ..employees.repository import EmployeeRepository
from ..employees.resolver import EmployeeResolver
from ..policy.model import AttendancePolicy
from ..work_calendar.service import WorkCalendar, working_days_between
from .classifier import classify_day
from .factory import ApprovalStrategyFactory
from .model import AttendanceRecord, Diagnostic, ImportBatch, ImportRow, ImportSummary, Punch
from .record_builder import merge_record, records_equal, synthesize_absences
from .repository import AttendanceRepository, ImportBatchRepository, PunchRepository
from .sequencer import build_sequences

logger = logging.getLogger(__name__)

# Normalized header -> ImportRow field.
HEADER_ALIASES = {
    "external_id": ("id", "acno", "employeeid", "empid", "userid", "enno", "no", "badgeno", "employeeno"),
    "name": ("name", "employeename", "fullname", "employee"),
    "timestamp": ("time", "datetime", "timestamp", "checktime", "date", "punchtime"),
    "status": ("status", "state", "checktype", "type", "inout"),
    "location": ("location", "device", "terminal"),
    "department": ("department", "dept"),
}

_HEADER_NOISE = re.compile(r"[^a-z0-9]")

_EXCEL_EXT = {".xlsx", ".xlsm", ".xls"}


def compute_checksum(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def _header_key(value) -> str:
    return _HEADER_NOISE.sub("", str(value).lower())


def _map_headers(columns: Sequence) -> dict[str, str]:
    mapping: dict[str, str] = {}
    keys = {_header_key(c): c for c in columns}
    for field_name, aliases in HEADER_ALIASES.items():
        for alias in aliases:
            if alias in keys:
                mapping[field_name] = keys[alias]
                break
    return mapping


def read_tabular(content: bytes, filename: str) -> list[ImportRow]:
    """Read a CSV or Excel export into raw rows. Row numbers are spreadsheet-style (header is row 1)."""
    ext = os.path.splitext(filename or "")[1].lower()
    try:
        if ext in _EXCEL_EXT:
            df = pd.read_excel(io.BytesIO(content), dtype=str)
        else:
            df = pd.read_csv(io.BytesIO(content), dtype=str, keep_default_na=False)
    except (ValueError, OSError, UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ValidationError(f"Could not read {filename or 'file'}: {e}") from e

    mapping = _map_headers(list(df.columns))
    if "timestamp" not in mapping or "status" not in mapping:
        logger.warning("Import file %s lacks timestamp/status columns: %s", filename, list(df.columns))

    rows: list[ImportRow] = []
    for index, record in enumerate(df.to_dict(orient="records")):
        def cell(field_name: str) -> Optional[str]:
            column = mapping.get(field_name)
            return clean_cell(record.get(column)) if column is not None else None

        rows.append(
            ImportRow(
                row_number=index + 2,
                external_id=cell("external_id"),
                name=cell("name"),
                timestamp=cell("timestamp"),
                status=cell("status"),
                location=cell("location"),
                department=cell("department"),
            )
        )
    return rows


def parse_direction(status: Optional[str]) -> PunchDirection:
    text = (status or "").upper()
    if "OUT" in text:
        return PunchDirection.OUT
    if "IN" in text:
        return PunchDirection.IN
    raise ValidationError(f"Unrecognized status {status!r}, expected IN or OUT")


def _rows_checksum(rows: Sequence[ImportRow]) -> str:
    payload = json.dumps(
        [[r.external_id, r.name, r.timestamp, r.status, r.location, r.department] for r in rows],
        ensure_ascii=False,
    )
    return compute_checksum(payload.encode("utf-8"))


@dataclass(frozen=True)
class _ParsedPunch:
    punch: Punch
    business_day: date


class AttendanceImporter:
    def __init__(
        self,
        attendance: AttendanceRepository,
        punches: PunchRepository,
        batches: ImportBatchRepository,
        employees: EmployeeRepository,
        work_calendar: WorkCalendar,
        policy: AttendancePolicy,
        *,
        strategy_factory: ApprovalStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._punches = punches
        self._batches = batches
        self._employees = employees
        self._calendar = work_calendar
        self._policy = policy
        self._factory = strategy_factory or ApprovalStrategyFactory()

    def find_previous_import(self, content: bytes) -> Optional[ImportBatch]:
        return self._batches.find_by_checksum(compute_checksum(content))

    def list_batches(self, *, limit: int = DEFAULT_IMPORT_HISTORY_LIMIT) -> Sequence[ImportBatch]:
        return self._batches.list_recent(limit)

    def import_file(
        self, content: bytes, filename: str, *, uploaded_by: int | None = None, now: datetime | None = None
    ) -> ImportSummary:
        if not content:
            raise ValidationError("Uploaded file is empty")
        rows = read_tabular(content, filename)
        return self.import_rows(
            rows,
            source_file_name=filename,
            source_size=len(content),
            checksum=compute_checksum(content),
            uploaded_by=uploaded_by,
            now=now,
        )

    def import_rows(
        self,
        rows: Sequence[ImportRow],
        *,
        source_file_name: str = "rows",
        source_size: int = 0,
        checksum: str | None = None,
        uploaded_by: int | None = None,
        now: datetime | None = None,
    ) -> ImportSummary:
        now = now or now_utc()
        checksum = checksum or _rows_checksum(rows)

        summary = ImportSummary(checksum=checksum, total_rows=len(rows))
        previous = self._batches.find_by_checksum(checksum)
        if previous is not None:
            summary.repeat_of_batch_id = previous.batch_id
            logger.info("Import %s repeats batch %s (checksum %s)", source_file_name, previous.batch_id, checksum[:12])

        batch_id = self._batches.create(
            ImportBatch(
                batch_id=None,
                source_file_name=source_file_name,
                source_size=source_size,
                checksum=checksum,
                uploaded_by=uploaded_by,
                created_at=now,
            )
        )
        summary.batch_id = batch_id

        active = list(self._employees.list_active())
        resolver = EmployeeResolver(active)
        parsed = self._parse_rows(rows, resolver, batch_id, summary)

        if parsed:
            new_punches, records = self._reconcile(parsed, batch_id, summary)
            first_day = min(p.business_day for p in parsed)
            last_day = max(p.business_day for p in parsed)
            absences = self._absences(active, parsed, first_day, last_day, now, batch_id)
            summary.absences = len(absences)
            self._persist(new_punches, records + absences)
        elif rows:
            logger.warning("Import %s produced no usable punches", source_file_name)

        self._batches.update_summary(batch_id, summary.as_dict())
        logger.info(
            "Import batch %s (%s): %s rows, %s new punches, %s imported, %s updated, %s unchanged, "
            "%s skipped, %s absences, %s errors, %s warnings",
            batch_id,
            source_file_name,
            summary.total_rows,
            summary.punches,
            summary.imported,
            summary.updated,
            summary.unchanged,
            summary.skipped,
            summary.absences,
            len(summary.errors),
            len(summary.warnings),
        )
        return summary

    def _parse_rows(
        self, rows: Sequence[ImportRow], resolver: EmployeeResolver, batch_id: int, summary: ImportSummary
    ) -> list[_ParsedPunch]:
        tz = self._policy.reference_timezone
        parsed: list[_ParsedPunch] = []
        for row in rows:
            try:
                if not row.timestamp:
                    raise ValidationError("Missing timestamp")
                normalized = parse_device_timestamp(row.timestamp, tz)
                direction = parse_direction(row.status)
            except (TimestampParseError, ValidationError) as e:
                summary.errors.append(Diagnostic(row.row_number, str(e)))
                summary.skipped += 1
                continue

            resolution = resolver.resolve(row.external_id, row.name)
            if resolution.error:
                summary.errors.append(Diagnostic(row.row_number, resolution.error))
            if resolution.warning:
                summary.warnings.append(Diagnostic(row.row_number, resolution.warning))
            if resolution.employee is None:
                summary.skipped += 1
                continue

            parsed.append(
                _ParsedPunch(
                    punch=Punch(
                        employee_id=resolution.employee.employee_id,
                        instant=normalized.instant,
                        direction=direction,
                        raw_status_text=row.status or "",
                        source_location=row.location,
                        source_department=row.department,
                        import_batch_id=batch_id,
                    ),
                    business_day=normalized.business_day,
                )
            )
        return parsed

    def _reconcile(
        self, parsed: Sequence[_ParsedPunch], batch_id: int, summary: ImportSummary
    ) -> tuple[list[Punch], list[AttendanceRecord]]:
        tz = self._policy.reference_timezone
        first_day = min(p.business_day for p in parsed)
        last_day = max(p.business_day for p in parsed)
        employee_ids = sorted({p.punch.employee_id for p in parsed})

        start, _ = day_bounds_utc(first_day, tz)
        _, end = day_bounds_utc(last_day, tz)
        stored = self._punches.list_between(start, end, employee_ids=employee_ids)
        existing = {r.key: r for r in self._attendance.list_between(first_day, last_day, employee_ids=employee_ids)}

        groups: dict[tuple[int, date], dict] = defaultdict(dict)
        for p in stored:
            groups[(p.employee_id, business_day_of(p.instant, tz))][p.key] = p

        new_punches: list[Punch] = []
        for item in parsed:
            group = groups[(item.punch.employee_id, item.business_day)]
            if item.punch.key not in group:
                group[item.punch.key] = item.punch
                new_punches.append(item.punch)
        summary.punches = len(new_punches)

        touched = {(p.punch.employee_id, p.business_day) for p in parsed}
        records: list[AttendanceRecord] = []
        for key in sorted(touched):
            employee_id, day = key
            classification = classify_day(build_sequences(groups[key].values()), self._policy)
            for w in classification.warnings:
                summary.warnings.append(Diagnostic(None, f"Employee {employee_id} on {day.isoformat()}: {w}"))

            before = existing.get(key)
            record = merge_record(
                before,
                classification,
                employee_id=employee_id,
                business_day=day,
                policy=self._policy,
                import_batch_id=batch_id,
                factory=self._factory,
            )
            if before is None:
                summary.imported += 1
            elif records_equal(before, record):
                summary.unchanged += 1
                continue
            else:
                summary.updated += 1
            records.append(record)
        return new_punches, records

    def _absences(
        self,
        active,
        parsed: Sequence[_ParsedPunch],
        first_day: date,
        last_day: date,
        now: datetime,
        batch_id: int,
    ) -> list[AttendanceRecord]:
        if not self._policy.synthesize_absences:
            return []
        today = business_day_of(now, self._policy.reference_timezone)
        last_day = min(last_day, today)
        if last_day < first_day:
            return []

        working_days = working_days_between(self._calendar, first_day, last_day)
        present = {(p.punch.employee_id, p.business_day) for p in parsed}
        existing = self._attendance.existing_keys(first_day, last_day)
        return synthesize_absences(
            [e.employee_id for e in active], working_days, present, existing, import_batch_id=batch_id
        )

    def _persist(self, punches: Sequence[Punch], records: Sequence[AttendanceRecord]) -> None:
        size = self._policy.import_chunk_size
        for chunk in chunked(punches, size):
            self._punches.add_many(chunk)
        for chunk in chunked(records, size):
            self._attendance.upsert_many(chunk)
            logger.debug("Upserted %s attendance records", len(chunk))
