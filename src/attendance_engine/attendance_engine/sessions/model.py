from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import hours_between
from ..core.enums import WorkStatus
from ..punches.model import PunchRecord


@dataclass(frozen=True)
class SessionSegment:
    """Part of a session that falls on one calendar date."""

    work_date: date
    start: datetime
    end: datetime

    @property
    def hours(self) -> float:
        return hours_between(self.start, self.end)


@dataclass(frozen=True)
class WorkSession:
    """Derived pairing of one user's punches for one work date. Never persisted."""

    user_id: int
    work_date: date
    check_in: Optional[PunchRecord] = None
    check_out: Optional[PunchRecord] = None
    segments: Sequence[SessionSegment] = ()
    warnings: Sequence[str] = ()

    @property
    def state(self) -> WorkStatus:
        if self.check_in and self.check_out:
            return WorkStatus.NORMAL
        if self.check_in:
            return WorkStatus.CHECKOUT_MISSING
        if self.check_out:
            return WorkStatus.CHECKIN_MISSING
        return WorkStatus.NO_RECORD

    @property
    def is_complete(self) -> bool:
        return self.state == WorkStatus.NORMAL

    @property
    def crosses_midnight(self) -> bool:
        return self.is_complete and self.check_out.timestamp.date() > self.check_in.timestamp.date()

    @property
    def span_hours(self) -> float:
        if not self.is_complete:
            return 0.0
        return hours_between(self.check_in.timestamp, self.check_out.timestamp)
