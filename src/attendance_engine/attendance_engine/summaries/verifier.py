from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable

from ..core.constants import DEFAULT_VERIFY_SAMPLE_SIZE, DEFAULT_VERIFY_TOLERANCE_HOURS
from ..core.enums import DayType, WorkStatus
from ..policies.model import WorkPolicy
from ..punches.repository import PunchRepository
from ..sessions.pairer import SessionPairer
from .calculator import break_minutes_for
from .repository import SummaryRepository

logger = logging.getLogger(__name__)


@dataclass
class VerificationReport:
    checked: int = 0
    mismatches: int = 0
    errors: int = 0
    warnings: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "checked": self.checked,
            "mismatches": self.mismatches,
            "errors": self.errors,
            "warnings": list(self.warnings),
        }


class SummaryVerifier:
    """Cross-check stored summaries against sessions re-paired from raw punches.

    Expected hours are the session span minus breaks, compared with the stored
    basic + overtime. Leave and paid-rest rows carry credited hours and are
    skipped. Findings are warnings only; the batch result is never affected.
    """

    def __init__(
        self,
        punches: PunchRepository,
        summaries: SummaryRepository,
        *,
        policy: WorkPolicy,
        pairer: SessionPairer | None = None,
        sample_size: int = DEFAULT_VERIFY_SAMPLE_SIZE,
        tolerance_hours: float = DEFAULT_VERIFY_TOLERANCE_HOURS,
    ):
        self._punches = punches
        self._summaries = summaries
        self._policy = policy
        self._pairer = pairer or SessionPairer()
        self._sample_size = int(sample_size)
        self._tolerance = float(tolerance_hours)

    def _expected_hours(self, user_id: int, work_date: date) -> float:
        grouped = defaultdict(list)
        for p in self._punches.list_for_user_dates(user_id, work_date - timedelta(days=1), work_date + timedelta(days=1)):
            grouped[p.work_date].append(p)
        session = self._pairer.pair(
            user_id,
            work_date,
            grouped.get(work_date, []),
            previous_day=grouped.get(work_date - timedelta(days=1), []),
            next_day=grouped.get(work_date + timedelta(days=1), []),
        )
        if not session.is_complete:
            return 0.0
        minutes, _ = break_minutes_for(session, self._policy)
        return max(0.0, session.span_hours - minutes / 60.0)

    def verify(self, keys: Iterable[tuple[int, date]]) -> VerificationReport:
        report = VerificationReport()
        for user_id, work_date in sorted(set(keys))[: self._sample_size]:
            try:
                stored = self._summaries.get_daily(user_id, work_date)
                if stored is None:
                    continue
                if stored.work_status in (WorkStatus.LEAVE, WorkStatus.PAID_REST_DAY) or stored.day_type == DayType.LEAVE:
                    continue
                report.checked += 1
                expected = self._expected_hours(user_id, work_date)
                diff = abs(expected - stored.work_hours)
                if diff > self._tolerance:
                    report.mismatches += 1
                    msg = (
                        f"User {user_id} {work_date}: stored {stored.work_hours:.1f}h, "
                        f"expected {expected:.1f}h from punches"
                    )
                    logger.warning("Verification mismatch: %s", msg)
                    report.warnings.append(msg)
            except Exception as e:
                report.errors += 1
                logger.warning("Verification of user %s %s failed: %s", user_id, work_date, e)
        return report
