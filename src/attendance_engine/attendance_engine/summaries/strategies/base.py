from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...policies.model import DayClassification


@dataclass(frozen=True)
class HourBreakdown:
    basic: float = 0.0
    overtime: float = 0.0
    night: float = 0.0
    substitute: float = 0.0
    compensatory: float = 0.0

    def __add__(self, other: "HourBreakdown") -> "HourBreakdown":
        return HourBreakdown(
            basic=self.basic + other.basic,
            overtime=self.overtime + other.overtime,
            night=self.night + other.night,
            substitute=self.substitute + other.substitute,
            compensatory=self.compensatory + other.compensatory,
        )


class HoursStrategy(ABC):
    """Strategy Pattern: how worked hours on one segment are split for its day type.

    ``prior_hours`` is the worked time already counted on earlier segments of
    the same session, so thresholds and tiers apply to the session as a whole.
    """

    @abstractmethod
    def compute(
        self,
        *,
        worked_hours: float,
        night_hours: float,
        prior_hours: float,
        classification: DayClassification,
    ) -> HourBreakdown:
        raise NotImplementedError


def tiered_accrual(worked_hours: float, night_hours: float, prior_hours: float, classification: DayClassification) -> float:
    rates = classification.rate_table
    within = min(worked_hours, max(0.0, rates.tier_hours - prior_hours))
    beyond = worked_hours - within
    return within * rates.base_multiplier + beyond * rates.over_multiplier + night_hours * rates.night_uplift
