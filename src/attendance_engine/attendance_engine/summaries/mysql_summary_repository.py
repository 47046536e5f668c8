from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import DayType, WorkStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import DailyWorkSummary, MonthlyWorkStats
from .repository import SummaryRepository

_DAILY_COLUMNS = (
    "user_id, work_date, check_in_time, check_out_time, basic_hours, overtime_hours, night_hours, "
    "substitute_hours, compensatory_hours, work_status, day_type, had_dinner, paid_rest_flag, "
    "break_minutes, note, calculated_at"
)

_MONTHLY_COLUMNS = (
    "user_id, work_month, total_basic_hours, total_overtime_hours, total_night_hours, "
    "total_substitute_hours, total_compensatory_hours, total_work_hours, worked_days, "
    "missing_record_days, paid_rest_days, leave_days, calculated_at"
)

_INSERT_DAILY = f"""
    INSERT INTO daily_work_summary({_DAILY_COLUMNS})
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _daily_params(s: DailyWorkSummary) -> tuple:
    return (
        s.user_id,
        s.work_date,
        s.check_in_time,
        s.check_out_time,
        s.basic_hours,
        s.overtime_hours,
        s.night_hours,
        s.substitute_hours,
        s.compensatory_hours,
        s.work_status.value,
        s.day_type.value,
        1 if s.had_dinner else 0,
        1 if s.paid_rest_flag else 0,
        int(s.break_minutes),
        s.note,
        s.calculated_at,
    )


def _to_daily(r: dict[str, Any]) -> DailyWorkSummary:
    return DailyWorkSummary(
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=normalize_mysql_time(r.get("check_in_time")),
        check_out_time=normalize_mysql_time(r.get("check_out_time")),
        basic_hours=float(r["basic_hours"]),
        overtime_hours=float(r["overtime_hours"]),
        night_hours=float(r["night_hours"]),
        substitute_hours=float(r["substitute_hours"]),
        compensatory_hours=float(r["compensatory_hours"]),
        work_status=WorkStatus(r["work_status"]),
        day_type=DayType(r["day_type"]),
        had_dinner=bool(r.get("had_dinner")),
        paid_rest_flag=bool(r.get("paid_rest_flag")),
        break_minutes=int(r.get("break_minutes") or 0),
        note=r.get("note"),
        calculated_at=r["calculated_at"],
    )


def _to_monthly(r: dict[str, Any]) -> MonthlyWorkStats:
    return MonthlyWorkStats(
        user_id=int(r["user_id"]),
        work_month=r["work_month"],
        total_basic_hours=float(r["total_basic_hours"]),
        total_overtime_hours=float(r["total_overtime_hours"]),
        total_night_hours=float(r["total_night_hours"]),
        total_substitute_hours=float(r["total_substitute_hours"]),
        total_compensatory_hours=float(r["total_compensatory_hours"]),
        total_work_hours=float(r["total_work_hours"]),
        worked_days=int(r["worked_days"]),
        missing_record_days=int(r["missing_record_days"]),
        paid_rest_days=int(r["paid_rest_days"]),
        leave_days=int(r["leave_days"]),
        calculated_at=r["calculated_at"],
    )


class MySQLSummaryRepository(SummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_daily(self, user_id: int, work_date: date) -> Optional[DailyWorkSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_DAILY_COLUMNS} FROM daily_work_summary WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_daily(r) if r else None

    def list_daily(self, user_id: int, start: date, end: date) -> Sequence[DailyWorkSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAILY_COLUMNS}
                FROM daily_work_summary
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (int(user_id), start, end),
            )
            return [_to_daily(r) for r in fetchall(cur)]

    def upsert_daily(self, summary: DailyWorkSummary) -> None:
        # Every column is overwritten so the row never keeps values from an earlier run.
        updates = ", ".join(
            f"{c.strip()}=VALUES({c.strip()})" for c in _DAILY_COLUMNS.split(",")[2:]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_INSERT_DAILY} ON DUPLICATE KEY UPDATE {updates}", _daily_params(summary))

    def replace_daily(self, summary: DailyWorkSummary) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM daily_work_summary WHERE user_id=%s AND work_date=%s",
                (summary.user_id, summary.work_date),
            )
            cur.execute(_INSERT_DAILY, _daily_params(summary))

    def delete_daily(self, user_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM daily_work_summary WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            return cur.rowcount > 0

    def get_monthly(self, user_id: int, work_month: str) -> Optional[MonthlyWorkStats]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MONTHLY_COLUMNS} FROM monthly_work_stats WHERE user_id=%s AND work_month=%s",
                (int(user_id), work_month),
            )
            r = fetchone(cur)
            return _to_monthly(r) if r else None

    def list_monthly(self, work_month: str, *, user_id: Optional[int] = None) -> Sequence[MonthlyWorkStats]:
        sql = f"SELECT {_MONTHLY_COLUMNS} FROM monthly_work_stats WHERE work_month=%s"
        params: list[Any] = [work_month]
        if user_id is not None:
            sql += " AND user_id=%s"
            params.append(int(user_id))
        sql += " ORDER BY user_id"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_monthly(r) for r in fetchall(cur)]

    def replace_monthly(self, stats: MonthlyWorkStats) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM monthly_work_stats WHERE user_id=%s AND work_month=%s",
                (stats.user_id, stats.work_month),
            )
            cur.execute(
                f"""
                INSERT INTO monthly_work_stats({_MONTHLY_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    stats.user_id,
                    stats.work_month,
                    stats.total_basic_hours,
                    stats.total_overtime_hours,
                    stats.total_night_hours,
                    stats.total_substitute_hours,
                    stats.total_compensatory_hours,
                    stats.total_work_hours,
                    stats.worked_days,
                    stats.missing_record_days,
                    stats.paid_rest_days,
                    stats.leave_days,
                    stats.calculated_at,
                ),
            )

    def delete_monthly(self, user_id: int, work_month: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM monthly_work_stats WHERE user_id=%s AND work_month=%s",
                (int(user_id), work_month),
            )
            return cur.rowcount > 0
