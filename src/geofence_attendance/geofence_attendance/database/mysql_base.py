from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.constants import MYSQL_DUPLICATE_KEY
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on error."""
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


def is_duplicate_key(exc: BaseException) -> bool:
    return isinstance(exc, mysql.connector.IntegrityError) and getattr(exc, "errno", None) == MYSQL_DUPLICATE_KEY


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Class start/end columns to ``datetime.time``.

    The pure-Python connector hands TIME back as ``timedelta``; the C
    extension and some proxies give ``time`` or an "HH:MM[:SS]" string.
    """
    if value is None or isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        h, rem = divmod(int(value.total_seconds()) % 86400, 3600)
        m, s = divmod(rem, 60)
        return time(h, m, s)

    if isinstance(value, str):
        fields = [int(p) for p in value.strip().split(":") if p != ""]
        if len(fields) not in (2, 3):
            raise ValueError(f"Invalid TIME value: {value!r}")
        return time(*fields)

    raise TypeError(f"Unsupported TIME value: {type(value)!r}")
