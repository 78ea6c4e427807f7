from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Borrow a connection for one transaction.

    Commits when the block exits cleanly, rolls back and re-raises otherwise.
    """
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


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def to_float(value: Any) -> Optional[float]:
    """DECIMAL columns come back as Decimal; the domain works in floats."""
    if value is None:
        return None
    return float(value)


def _has_errno(exc: mysql.connector.Error) -> bool:
    # mysql-connector uses -1 when the server sent no error number.
    return exc.errno is not None and exc.errno > 0


def is_duplicate_key(exc: mysql.connector.Error) -> bool:
    if _has_errno(exc):
        return exc.errno == errorcode.ER_DUP_ENTRY
    # No structured code (e.g. a wrapped driver error): fall back to the text.
    return "duplicate" in str(exc).lower()


def is_missing_parent(exc: mysql.connector.Error) -> bool:
    if _has_errno(exc):
        return exc.errno in (errorcode.ER_NO_REFERENCED_ROW_2, errorcode.ER_NO_REFERENCED_ROW)
    return "foreign key constraint fails" in str(exc).lower()
