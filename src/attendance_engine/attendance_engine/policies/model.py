from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Sequence

from ..core import constants
from ..core.enums import DayType
from ..holidays.model import Holiday
from ..leaves.model import ApprovedLeave


@dataclass(frozen=True)
class FlexibleWorkPeriod:
    """A configured date range that overrides the daily overtime threshold."""

    period_id: int
    start_date: date
    end_date: date
    weekly_standard_hours: float
    daily_overtime_threshold: float
    created_at: datetime

    def covers(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date


@dataclass(frozen=True)
class RateTable:
    """Multipliers applied to one day type.

    For accrual day types (Saturday, Sunday/holiday) hours up to ``tier_hours``
    earn ``base_multiplier``, hours beyond earn ``over_multiplier`` and every
    night hour adds ``night_uplift``.
    """

    name: str
    base_multiplier: float
    over_multiplier: float
    night_uplift: float
    tier_hours: float = 8.0


WEEKDAY_RATES = RateTable(name="weekday", base_multiplier=1.0, over_multiplier=1.5, night_uplift=0.5)
SATURDAY_RATES = RateTable(name="substitute", base_multiplier=1.0, over_multiplier=1.5, night_uplift=0.5)
HOLIDAY_RATES = RateTable(name="compensatory", base_multiplier=1.5, over_multiplier=2.0, night_uplift=0.5)


def _as_time(value: Any) -> time:
    if isinstance(value, time):
        return value
    return datetime.strptime(str(value), "%H:%M").time()


@dataclass(frozen=True)
class WorkPolicy:
    ghost_pair_window_minutes: int = constants.DEFAULT_GHOST_PAIR_WINDOW_MINUTES
    standard_daily_hours: float = constants.DEFAULT_STANDARD_DAILY_HOURS
    lunch_break_minutes: int = constants.DEFAULT_LUNCH_BREAK_MINUTES
    lunch_min_span_hours: float = constants.DEFAULT_LUNCH_MIN_SPAN_HOURS
    dinner_break_minutes: int = constants.DEFAULT_DINNER_BREAK_MINUTES
    evening_threshold: time = _as_time(constants.DEFAULT_EVENING_THRESHOLD)
    night_start_hour: int = constants.DEFAULT_NIGHT_START_HOUR
    night_end_hour: int = constants.DEFAULT_NIGHT_END_HOUR
    long_span_warning_hours: float = constants.DEFAULT_LONG_SPAN_WARNING_HOURS
    max_overnight_span_hours: float = constants.DEFAULT_MAX_OVERNIGHT_SPAN_HOURS
    paid_rest_weekly_hours: float = constants.DEFAULT_PAID_REST_WEEKLY_HOURS
    paid_rest_day_hours: float = constants.DEFAULT_PAID_REST_DAY_HOURS
    full_day_leave_hours: float = constants.DEFAULT_FULL_DAY_LEAVE_HOURS
    half_day_leave_hours: float = constants.DEFAULT_HALF_DAY_LEAVE_HOURS
    ignored_punch_categories: frozenset[str] = frozenset(constants.DEFAULT_IGNORED_PUNCH_CATEGORIES)

    @classmethod
    def from_settings(cls, engine: Mapping[str, Any] | None) -> "WorkPolicy":
        """Build a policy from the ENGINE settings dict; unknown keys are ignored."""
        engine = dict(engine or {})
        kwargs: dict[str, Any] = {}
        mapping = {
            "GHOST_PAIR_WINDOW_MINUTES": ("ghost_pair_window_minutes", int),
            "STANDARD_DAILY_HOURS": ("standard_daily_hours", float),
            "LUNCH_BREAK_MINUTES": ("lunch_break_minutes", int),
            "LUNCH_MIN_SPAN_HOURS": ("lunch_min_span_hours", float),
            "DINNER_BREAK_MINUTES": ("dinner_break_minutes", int),
            "EVENING_THRESHOLD": ("evening_threshold", _as_time),
            "LONG_SPAN_WARNING_HOURS": ("long_span_warning_hours", float),
            "MAX_OVERNIGHT_SPAN_HOURS": ("max_overnight_span_hours", float),
            "PAID_REST_WEEKLY_HOURS": ("paid_rest_weekly_hours", float),
            "PAID_REST_DAY_HOURS": ("paid_rest_day_hours", float),
        }
        for key, (attr, conv) in mapping.items():
            if engine.get(key) is not None:
                kwargs[attr] = conv(engine[key])
        if engine.get("IGNORED_PUNCH_CATEGORIES") is not None:
            kwargs["ignored_punch_categories"] = frozenset(
                c.strip().upper()
                for c in engine["IGNORED_PUNCH_CATEGORIES"]
                if c and c.strip()
            )
        return cls(**kwargs)


@dataclass(frozen=True)
class PolicySnapshot:
    """Everything the rate resolver may read, captured once per batch."""

    policy: WorkPolicy = field(default_factory=WorkPolicy)
    flexible_periods: Sequence[FlexibleWorkPeriod] = ()
    weekday_rates: RateTable = WEEKDAY_RATES
    saturday_rates: RateTable = SATURDAY_RATES
    holiday_rates: RateTable = HOLIDAY_RATES


@dataclass(frozen=True)
class DayClassification:
    user_id: int
    work_date: date
    day_type: DayType
    rate_table: RateTable
    threshold_hours: float
    flexible_period: Optional[FlexibleWorkPeriod] = None
    holiday: Optional[Holiday] = None
    leave: Optional[ApprovedLeave] = None
    leave_hours: float = 0.0
    paid_rest_eligible: bool = False

    @property
    def is_accrual_day(self) -> bool:
        return self.day_type in (DayType.SATURDAY, DayType.SUNDAY, DayType.HOLIDAY)
