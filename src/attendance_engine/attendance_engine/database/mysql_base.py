from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """One connection, one transaction: commit on success, rollback on any error."""
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
    return list(cur.fetchall() or [])


def is_duplicate_key(error: mysql.connector.Error) -> bool:
    return isinstance(error, mysql.connector.IntegrityError) and error.errno == errorcode.ER_DUP_ENTRY


def normalize_mysql_time(value: Any) -> Optional[time]:
    """TIME columns come back as ``time``, ``timedelta`` or ``'HH:MM[:SS]'`` depending on the connector."""
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)
    if isinstance(value, str):
        parts = [int(p) for p in value.strip().split(":") if p]
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        return time(*parts[:3])
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
