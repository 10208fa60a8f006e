from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def named_lock(conn_factory: DatabaseConnection, name: str, *, timeout_seconds: int = 10) -> Iterator[None]:
    """MySQL advisory lock held for the duration of the block.

    The lock lives on its own connection; the work inside the block may use
    other short-lived connections.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SELECT GET_LOCK(%s, %s)", (name, int(timeout_seconds)))
        row = cur.fetchone()
        if not row or row[0] != 1:
            raise ConflictError("Another request is updating this attendance day, please retry")
        try:
            yield
        finally:
            cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
            cur.fetchone()
            cur.close()
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
