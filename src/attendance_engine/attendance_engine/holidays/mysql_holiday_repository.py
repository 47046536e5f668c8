from __future__ import annotations

from datetime import date
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Holiday
from .repository import HolidayCalendar


class MySQLHolidayCalendar(HolidayCalendar):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_holiday(self, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_date, name FROM holidays WHERE holiday_date=%s",
                (holiday_date,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Holiday(holiday_date=row["holiday_date"], name=row["name"])
