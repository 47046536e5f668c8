from __future__ import annotations

from typing import Any, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import UserDirectory

_COLUMNS = "user_id, full_name, employee_number, is_active"


def _to_employee(row: dict[str, Any]) -> Employee:
    return Employee(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        employee_number=row.get("employee_number"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserDirectory(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_employee_number(self, employee_number: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE employee_number=%s AND is_active=1",
                (employee_number,),
            )
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_name(self, full_name: str) -> Optional[Employee]:
        # Names are not unique; an ambiguous name does not resolve.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE full_name=%s AND is_active=1 LIMIT 2",
                (full_name,),
            )
            rows = fetchall(cur)
            if len(rows) != 1:
                return None
            return _to_employee(rows[0])

