from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import hours_between, round_hours
from ..core.enums import PunchSource
from ..policies.model import DayClassification, WorkPolicy
from ..sessions.model import WorkSession
from ..sessions.splitter import split_at_midnight
from .factory import HoursStrategyFactory
from .strategies.base import HourBreakdown

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HourResult:
    """Rounded hour totals for one session, attributed to its start date."""

    basic: float = 0.0
    overtime: float = 0.0
    night: float = 0.0
    substitute: float = 0.0
    compensatory: float = 0.0
    worked: float = 0.0
    break_minutes: int = 0
    had_dinner: bool = False
    warnings: Sequence[str] = field(default_factory=tuple)


def dinner_confirmed(session: WorkSession, evening: time) -> bool:
    """Dinner counts when the session spans an evening instant and the checkout confirms it.

    Terminal checkouts past the evening threshold confirm it automatically;
    web and manual checkouts only via their ``had_dinner`` flag.
    """
    if not session.is_complete:
        return False
    start, end = session.check_in.timestamp, session.check_out.timestamp
    d = start.date()
    crosses = False
    while d <= end.date():
        instant = datetime.combine(d, evening)
        if start < instant < end:
            crosses = True
            break
        d += timedelta(days=1)
    if not crosses:
        return False
    return session.check_out.source == PunchSource.TERMINAL or session.check_out.had_dinner


def break_minutes_for(session: WorkSession, policy: WorkPolicy) -> tuple[int, bool]:
    minutes = 0
    if session.span_hours >= policy.lunch_min_span_hours:
        minutes += policy.lunch_break_minutes
    dinner = dinner_confirmed(session, policy.evening_threshold)
    if dinner:
        minutes += policy.dinner_break_minutes
    return minutes, dinner


def night_overlap_hours(start: datetime, end: datetime, policy: WorkPolicy) -> float:
    """Hours of [start, end) inside the nightly [night_start, night_end) windows."""
    total = 0.0
    d = start.date() - timedelta(days=1)
    while d <= end.date():
        w_start = datetime.combine(d, time(policy.night_start_hour))
        w_end = datetime.combine(d + timedelta(days=1), time(policy.night_end_hour))
        lo, hi = max(start, w_start), min(end, w_end)
        if hi > lo:
            total += hours_between(lo, hi)
        d += timedelta(days=1)
    return total


class HourCalculator:
    """Compute basic, overtime, night and accrual hours for one session.

    Breaks are deducted from the earliest segment first, overflowing into the
    next. Every segment is split with the strategy of its own date's
    classification; values are rounded once at the end.
    """

    def __init__(self, *, strategy_factory: Optional[HoursStrategyFactory] = None):
        self._factory = strategy_factory or HoursStrategyFactory()

    def calculate(
        self,
        session: WorkSession,
        classifications: Mapping[date, DayClassification],
        policy: WorkPolicy,
    ) -> HourResult:
        head = classifications.get(session.work_date)
        leave_credit = head.leave_hours if head else 0.0

        if not session.is_complete:
            return HourResult(basic=round_hours(leave_credit), warnings=tuple(session.warnings))

        if not session.segments:
            session = split_at_midnight(session, long_span_warning_hours=policy.long_span_warning_hours)

        break_min, had_dinner = break_minutes_for(session, policy)
        remaining_break = break_min / 60.0

        total = HourBreakdown()
        worked_total = 0.0
        for seg in session.segments:
            deduct = min(seg.hours, remaining_break)
            remaining_break -= deduct
            worked = seg.hours - deduct
            night = min(worked, night_overlap_hours(seg.start, seg.end, policy))

            classification = classifications[seg.work_date]
            strategy = self._factory.for_day(classification.day_type)
            total = total + strategy.compute(
                worked_hours=worked,
                night_hours=night,
                prior_hours=worked_total,
                classification=classification,
            )
            worked_total += worked

        return HourResult(
            basic=round_hours(total.basic + leave_credit),
            overtime=round_hours(total.overtime),
            night=round_hours(total.night),
            substitute=round_hours(total.substitute),
            compensatory=round_hours(total.compensatory),
            worked=round_hours(worked_total),
            break_minutes=break_min,
            had_dinner=had_dinner,
            warnings=tuple(session.warnings),
        )
