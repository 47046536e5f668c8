from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import FlexibleWorkPeriod
from .repository import FlexibleWorkPeriodStore


class MySQLFlexibleWorkPeriodStore(FlexibleWorkPeriodStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_periods(self) -> Sequence[FlexibleWorkPeriod]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT period_id, start_date, end_date, weekly_standard_hours,
                       daily_overtime_threshold, created_at
                FROM flexible_work_periods
                ORDER BY start_date
                """
            )
            return [
                FlexibleWorkPeriod(
                    period_id=int(r["period_id"]),
                    start_date=r["start_date"],
                    end_date=r["end_date"],
                    weekly_standard_hours=float(r["weekly_standard_hours"]),
                    daily_overtime_threshold=float(r["daily_overtime_threshold"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
