from __future__ import annotations

from datetime import date
from typing import Any, Sequence

import mysql.connector

from ..core.enums import PunchKind, PunchSource
from ..core.exceptions import PersistenceConflict, PersistenceFailure
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, is_duplicate_key, normalize_mysql_time
from .model import PunchRecord
from .repository import PunchRepository

_COLUMNS = (
    "punch_id, user_id, employee_number, work_date, punch_time, punch_timestamp, kind, source, "
    "had_dinner, terminal_id, location_lat, location_lng, note"
)

_INSERT = """
    INSERT INTO punch_records(
        user_id, employee_number, work_date, punch_time, punch_timestamp, kind, source,
        had_dinner, terminal_id, location_lat, location_lng, note
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _params(record: PunchRecord) -> tuple:
    return (
        record.user_id,
        record.employee_number,
        record.work_date,
        record.local_time,
        record.timestamp,
        record.kind.value,
        record.source.value,
        1 if record.had_dinner else 0,
        record.terminal_id,
        record.location_lat,
        record.location_lng,
        record.note,
    )


def _to_record(row: dict[str, Any]) -> PunchRecord:
    return PunchRecord(
        punch_id=int(row["punch_id"]),
        user_id=int(row["user_id"]),
        employee_number=row.get("employee_number"),
        work_date=row["work_date"],
        local_time=normalize_mysql_time(row["punch_time"]),
        timestamp=row["punch_timestamp"],
        kind=PunchKind(row["kind"]),
        source=PunchSource(row["source"]),
        had_dinner=bool(row.get("had_dinner")),
        terminal_id=row.get("terminal_id"),
        location_lat=float(row["location_lat"]) if row.get("location_lat") is not None else None,
        location_lng=float(row["location_lng"]) if row.get("location_lng") is not None else None,
        note=row.get("note"),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, record: PunchRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_INSERT, _params(record))
                return int(cur.lastrowid)
        except mysql.connector.Error as e:
            if is_duplicate_key(e):
                raise PersistenceConflict(f"punch already stored: {record.key}") from e
            raise PersistenceFailure(str(e)) from e

    def replace(self, record: PunchRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "DELETE FROM punch_records WHERE user_id=%s AND punch_timestamp=%s AND kind=%s",
                    (record.user_id, record.timestamp, record.kind.value),
                )
                replaced = cur.rowcount > 0
                cur.execute(_INSERT, _params(record))
                return replaced
        except mysql.connector.Error as e:
            if is_duplicate_key(e):
                raise PersistenceConflict(f"punch stored concurrently: {record.key}") from e
            raise PersistenceFailure(str(e)) from e

    def list_for_user_dates(self, user_id: int, start: date, end: date) -> Sequence[PunchRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM punch_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY punch_timestamp ASC, punch_id ASC
                """,
                (int(user_id), start, end),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def dates_with_punches(self, user_id: int, start: date, end: date) -> Sequence[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT work_date
                FROM punch_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (int(user_id), start, end),
            )
            return [r["work_date"] for r in fetchall(cur)]
