from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.enums import DayType, LeaveKind
from ..holidays.repository import HolidayCalendar
from ..leaves.repository import LeaveApprovalStore
from .model import DayClassification, FlexibleWorkPeriod, PolicySnapshot

logger = logging.getLogger(__name__)


def validate_periods(periods: Sequence[FlexibleWorkPeriod]) -> list[str]:
    """Return one warning per pair of overlapping flexible-work periods."""
    warnings: list[str] = []
    ordered = sorted(periods, key=lambda p: (p.start_date, p.period_id))
    for i, a in enumerate(ordered):
        if a.end_date < a.start_date:
            warnings.append(f"Flexible period {a.period_id} ends before it starts")
        for b in ordered[i + 1:]:
            if b.start_date > a.end_date:
                break
            warnings.append(
                f"Flexible periods {a.period_id} and {b.period_id} overlap "
                f"({max(a.start_date, b.start_date)}..{min(a.end_date, b.end_date)})"
            )
    return warnings


def find_active_period(d: date, periods: Sequence[FlexibleWorkPeriod]) -> Optional[FlexibleWorkPeriod]:
    """Pick the period covering ``d``; on overlap the most recently created one wins."""
    covering = [p for p in periods if p.covers(d)]
    if not covering:
        return None
    covering.sort(key=lambda p: (p.created_at, p.period_id), reverse=True)
    if len(covering) > 1:
        logger.warning(
            "Overlapping flexible periods %s on %s; using period %s",
            [p.period_id for p in covering], d, covering[0].period_id,
        )
    return covering[0]


class DayTypeResolver:
    """Classify a (user, date) and pick its rate table and overtime threshold.

    Priority: approved leave > public holiday > Saturday > Sunday > weekday.
    Holiday and leave lookups go to the collaborators; everything else is a
    pure function of the date and the policy snapshot.
    """

    def __init__(self, holidays: HolidayCalendar, leaves: LeaveApprovalStore):
        self._holidays = holidays
        self._leaves = leaves

    def resolve(
        self,
        user_id: int,
        work_date: date,
        snapshot: PolicySnapshot,
        *,
        preceding_week_hours: Optional[float] = None,
    ) -> DayClassification:
        policy = snapshot.policy
        period = find_active_period(work_date, snapshot.flexible_periods)
        threshold = period.daily_overtime_threshold if period else policy.standard_daily_hours

        leave = self._leaves.get_approved_leave(user_id, work_date)
        holiday = None if leave else self._holidays.get_holiday(work_date)

        is_sunday = work_date.weekday() == 6
        paid_rest = (
            is_sunday
            and leave is None
            and preceding_week_hours is not None
            and preceding_week_hours >= policy.paid_rest_weekly_hours
        )

        if leave:
            leave_hours = policy.half_day_leave_hours if leave.kind == LeaveKind.HALF_DAY else policy.full_day_leave_hours
            return DayClassification(
                user_id=user_id,
                work_date=work_date,
                day_type=DayType.LEAVE,
                rate_table=snapshot.weekday_rates,
                threshold_hours=max(0.0, threshold - leave_hours),
                flexible_period=period,
                leave=leave,
                leave_hours=leave_hours,
            )

        if holiday:
            day_type, rates = DayType.HOLIDAY, snapshot.holiday_rates
        elif work_date.weekday() == 5:
            day_type, rates = DayType.SATURDAY, snapshot.saturday_rates
        elif is_sunday:
            day_type, rates = DayType.SUNDAY, snapshot.holiday_rates
        else:
            day_type, rates = DayType.WEEKDAY, snapshot.weekday_rates

        return DayClassification(
            user_id=user_id,
            work_date=work_date,
            day_type=day_type,
            rate_table=rates,
            threshold_hours=threshold if day_type == DayType.WEEKDAY else rates.tier_hours,
            flexible_period=period,
            holiday=holiday,
            paid_rest_eligible=paid_rest,
        )
