from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import DayType
from .strategies.base import HoursStrategy
from .strategies.holiday_strategy import HolidayStrategy
from .strategies.saturday_strategy import SaturdayStrategy
from .strategies.weekday_strategy import WeekdayStrategy


@dataclass
class HoursStrategyFactory:
    """Factory Pattern: choose the hour split strategy for a day type."""

    _weekday: HoursStrategy = field(default_factory=WeekdayStrategy)
    _saturday: HoursStrategy = field(default_factory=SaturdayStrategy)
    _holiday: HoursStrategy = field(default_factory=HolidayStrategy)

    def for_day(self, day_type: DayType) -> HoursStrategy:
        if day_type == DayType.SATURDAY:
            return self._saturday
        if day_type in (DayType.SUNDAY, DayType.HOLIDAY):
            return self._holiday
        return self._weekday
