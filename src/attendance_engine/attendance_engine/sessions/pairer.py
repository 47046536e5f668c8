from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional, Sequence

from ..core.constants import DEFAULT_GHOST_PAIR_WINDOW_MINUTES, DEFAULT_MAX_OVERNIGHT_SPAN_HOURS
from ..punches.model import PunchRecord
from .model import WorkSession

logger = logging.getLogger(__name__)


class SessionPairer:
    """Find the true first check-in and last check-out of a user's day.

    Access-control terminals emit an unlock immediately followed by a lock
    (a "ghost pair") when somebody just passes through. Such adjacent pairs
    closer than ``ghost_window_minutes`` are skipped as a unit in both scans.
    """

    def __init__(
        self,
        *,
        ghost_window_minutes: int = DEFAULT_GHOST_PAIR_WINDOW_MINUTES,
        max_overnight_span_hours: float = DEFAULT_MAX_OVERNIGHT_SPAN_HOURS,
    ):
        self._window = timedelta(minutes=int(ghost_window_minutes))
        self._max_span = timedelta(hours=float(max_overnight_span_hours))

    def _is_ghost(self, check_in: PunchRecord, check_out: PunchRecord) -> bool:
        return (
            check_in.is_check_in
            and check_out.is_check_out
            and timedelta(0) <= check_out.timestamp - check_in.timestamp <= self._window
        )

    def first_check_in(self, punches: Sequence[PunchRecord]) -> Optional[PunchRecord]:
        i = 0
        while i < len(punches):
            p = punches[i]
            if p.is_check_in:
                if i + 1 < len(punches) and self._is_ghost(p, punches[i + 1]):
                    i += 2
                    continue
                return p
            i += 1
        return None

    def last_check_out(self, punches: Sequence[PunchRecord]) -> Optional[PunchRecord]:
        i = len(punches) - 1
        while i >= 0:
            p = punches[i]
            if p.is_check_out:
                if i - 1 >= 0 and self._is_ghost(punches[i - 1], p):
                    i -= 2
                    continue
                return p
            i -= 1
        return None

    def _pair_own(self, user_id: int, work_date: date, punches: Sequence[PunchRecord]) -> WorkSession:
        ordered = sorted(punches, key=lambda p: p.timestamp)
        check_in = self.first_check_in(ordered)
        check_out = self.last_check_out(ordered)
        if check_in and check_out and check_out.timestamp <= check_in.timestamp:
            check_out = None
        return WorkSession(user_id=user_id, work_date=work_date, check_in=check_in, check_out=check_out)

    @staticmethod
    def leading_check_outs(punches: Sequence[PunchRecord]) -> list[PunchRecord]:
        """Check-outs that precede the first check-in of the day."""
        out: list[PunchRecord] = []
        for p in sorted(punches, key=lambda p: p.timestamp):
            if p.is_check_in:
                break
            out.append(p)
        return out

    def is_open(self, user_id: int, work_date: date, punches: Sequence[PunchRecord]) -> Optional[PunchRecord]:
        """Return the check-in left without a check-out on this day, if any."""
        own = self._pair_own(user_id, work_date, punches)
        return own.check_in if own.check_in and not own.check_out else None

    def _claimable(self, check_in: PunchRecord, candidates: Sequence[PunchRecord]) -> list[PunchRecord]:
        return [
            c for c in candidates
            if timedelta(0) < c.timestamp - check_in.timestamp <= self._max_span
        ]

    def release_claimed(
        self,
        user_id: int,
        work_date: date,
        punches: Sequence[PunchRecord],
        previous_day: Sequence[PunchRecord] = (),
    ) -> list[PunchRecord]:
        """Drop this day's leading check-outs that close an open session of the previous day."""
        own = list(punches)
        prev_open = self.is_open(user_id, work_date - timedelta(days=1), previous_day) if previous_day else None
        if prev_open:
            claimed = {p.key for p in self._claimable(prev_open, self.leading_check_outs(own))}
            if claimed:
                logger.debug("User %s %s: %s check-out(s) belong to the previous day", user_id, work_date, len(claimed))
                own = [p for p in own if p.key not in claimed]
        return own

    def pair(
        self,
        user_id: int,
        work_date: date,
        punches: Sequence[PunchRecord],
        *,
        previous_day: Sequence[PunchRecord] = (),
        next_day: Sequence[PunchRecord] = (),
    ) -> WorkSession:
        """Pair one day's punches.

        Leading check-outs claimed by an open session on the previous day are
        removed first. If this day's own check-out is missing, the last of the
        next day's leading check-outs within the overnight span closes it.
        """
        own = self.release_claimed(user_id, work_date, punches, previous_day)
        session = self._pair_own(user_id, work_date, own)
        if session.check_in and not session.check_out and next_day:
            candidates = self._claimable(session.check_in, self.leading_check_outs(next_day))
            if candidates:
                session = WorkSession(
                    user_id=user_id,
                    work_date=work_date,
                    check_in=session.check_in,
                    check_out=candidates[-1],
                )
        return session
