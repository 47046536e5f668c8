from __future__ import annotations

from ...policies.model import DayClassification
from .base import HourBreakdown, HoursStrategy, tiered_accrual


class SaturdayStrategy(HoursStrategy):
    """All Saturday work is basic time and accrues substitute leave."""

    def compute(self, *, worked_hours, night_hours, prior_hours, classification: DayClassification) -> HourBreakdown:
        return HourBreakdown(
            basic=worked_hours,
            night=night_hours,
            substitute=tiered_accrual(worked_hours, night_hours, prior_hours, classification),
        )
