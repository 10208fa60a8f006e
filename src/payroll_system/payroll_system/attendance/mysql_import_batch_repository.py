from __future__ import annotations

import json
from typing import Optional, Sequence

from ..common.datetime_utils import from_naive_utc, to_naive_utc
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ImportBatch
from .repository import ImportBatchRepository

_SELECT = """
    SELECT batch_id, source_file_name, source_size, checksum, uploaded_by, created_at, summary
    FROM import_batches
"""


def _to_batch(r: dict) -> ImportBatch:
    summary = r.get("summary")
    return ImportBatch(
        batch_id=int(r["batch_id"]),
        source_file_name=r["source_file_name"],
        source_size=int(r["source_size"]),
        checksum=r["checksum"],
        uploaded_by=r.get("uploaded_by"),
        created_at=from_naive_utc(r["created_at"]),
        summary=json.loads(summary) if summary else None,
    )


class MySQLImportBatchRepository(ImportBatchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, batch: ImportBatch) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO import_batches(source_file_name, source_size, checksum, uploaded_by, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    batch.source_file_name,
                    int(batch.source_size),
                    batch.checksum,
                    batch.uploaded_by,
                    to_naive_utc(batch.created_at),
                ),
            )
            return int(cur.lastrowid)

    def find_by_checksum(self, checksum: str) -> Optional[ImportBatch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE checksum=%s ORDER BY batch_id ASC LIMIT 1", (checksum,))
            r = fetchone(cur)
            return _to_batch(r) if r else None

    def update_summary(self, batch_id: int, summary: dict) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE import_batches SET summary=%s WHERE batch_id=%s",
                (json.dumps(summary), int(batch_id)),
            )

    def list_recent(self, limit: int) -> Sequence[ImportBatch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} ORDER BY created_at DESC, batch_id DESC LIMIT %s", (int(limit),))
            return [_to_batch(r) for r in fetchall(cur)]
