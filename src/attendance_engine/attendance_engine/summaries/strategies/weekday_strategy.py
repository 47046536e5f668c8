from __future__ import annotations

from ...policies.model import DayClassification
from .base import HourBreakdown, HoursStrategy


class WeekdayStrategy(HoursStrategy):
    """Basic hours up to the day's threshold, the rest is overtime.

    Also used for leave days, whose threshold is already reduced by the
    credited leave hours. Night hours are tracked separately and always paid.
    """

    def compute(self, *, worked_hours, night_hours, prior_hours, classification: DayClassification) -> HourBreakdown:
        room = max(0.0, classification.threshold_hours - prior_hours)
        basic = min(worked_hours, room)
        return HourBreakdown(basic=basic, overtime=worked_hours - basic, night=night_hours)
