from __future__ import annotations

from ...policies.model import DayClassification
from .base import HourBreakdown, HoursStrategy, tiered_accrual


class HolidayStrategy(HoursStrategy):
    """Sunday and public-holiday work accrues compensatory leave."""

    def compute(self, *, worked_hours, night_hours, prior_hours, classification: DayClassification) -> HourBreakdown:
        return HourBreakdown(
            basic=worked_hours,
            night=night_hours,
            compensatory=tiered_accrual(worked_hours, night_hours, prior_hours, classification),
        )
