from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, Optional

from ..common.datetime_utils import round_hours
from ..core.enums import DayType, WorkStatus


@dataclass(frozen=True)
class DailyWorkSummary:
    """One materialized row per (user_id, work_date); always fully replaced."""

    user_id: int
    work_date: date
    check_in_time: Optional[time]
    check_out_time: Optional[time]
    basic_hours: float
    overtime_hours: float
    night_hours: float
    substitute_hours: float
    compensatory_hours: float
    work_status: WorkStatus
    day_type: DayType
    had_dinner: bool
    calculated_at: datetime
    paid_rest_flag: bool = False
    break_minutes: int = 0
    note: Optional[str] = None

    @property
    def key(self) -> tuple[int, date]:
        return (self.user_id, self.work_date)

    @property
    def work_hours(self) -> float:
        return self.basic_hours + self.overtime_hours

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "work_date": self.work_date.isoformat(),
            "check_in_time": self.check_in_time.strftime("%H:%M:%S") if self.check_in_time else None,
            "check_out_time": self.check_out_time.strftime("%H:%M:%S") if self.check_out_time else None,
            "basic_hours": self.basic_hours,
            "overtime_hours": self.overtime_hours,
            "night_hours": self.night_hours,
            "substitute_hours": self.substitute_hours,
            "compensatory_hours": self.compensatory_hours,
            "work_status": self.work_status.value,
            "day_type": self.day_type.value,
            "had_dinner": self.had_dinner,
            "paid_rest_flag": self.paid_rest_flag,
            "break_minutes": self.break_minutes,
            "note": self.note or "",
        }


@dataclass(frozen=True)
class MonthlyWorkStats:
    user_id: int
    work_month: str
    total_basic_hours: float
    total_overtime_hours: float
    total_night_hours: float
    total_substitute_hours: float
    total_compensatory_hours: float
    total_work_hours: float
    worked_days: int
    missing_record_days: int
    paid_rest_days: int
    leave_days: int
    calculated_at: datetime

    @classmethod
    def from_daily(
        cls,
        user_id: int,
        work_month: str,
        rows: Iterable[DailyWorkSummary],
        *,
        calculated_at: datetime,
    ) -> "MonthlyWorkStats":
        """Sum a month's daily rows. Total work hours count only days actually worked."""
        rows = list(rows)
        missing = (WorkStatus.CHECKIN_MISSING, WorkStatus.CHECKOUT_MISSING, WorkStatus.NO_RECORD)
        worked = [r for r in rows if r.work_status == WorkStatus.NORMAL]
        return cls(
            user_id=user_id,
            work_month=work_month,
            total_basic_hours=round_hours(sum(r.basic_hours for r in rows)),
            total_overtime_hours=round_hours(sum(r.overtime_hours for r in rows)),
            total_night_hours=round_hours(sum(r.night_hours for r in rows)),
            total_substitute_hours=round_hours(sum(r.substitute_hours for r in rows)),
            total_compensatory_hours=round_hours(sum(r.compensatory_hours for r in rows)),
            total_work_hours=round_hours(sum(r.work_hours for r in worked)),
            worked_days=len(worked),
            missing_record_days=sum(1 for r in rows if r.work_status in missing),
            paid_rest_days=sum(1 for r in rows if r.work_status == WorkStatus.PAID_REST_DAY),
            leave_days=sum(1 for r in rows if r.work_status == WorkStatus.LEAVE),
            calculated_at=calculated_at,
        )

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "work_month": self.work_month,
            "total_basic_hours": self.total_basic_hours,
            "total_overtime_hours": self.total_overtime_hours,
            "total_night_hours": self.total_night_hours,
            "total_substitute_hours": self.total_substitute_hours,
            "total_compensatory_hours": self.total_compensatory_hours,
            "total_work_hours": self.total_work_hours,
            "worked_days": self.worked_days,
            "missing_record_days": self.missing_record_days,
            "paid_rest_days": self.paid_rest_days,
            "leave_days": self.leave_days,
        }
