from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time, timedelta

from ..core.constants import DEFAULT_LONG_SPAN_WARNING_HOURS
from .model import SessionSegment, WorkSession

logger = logging.getLogger(__name__)


def split_at_midnight(
    session: WorkSession,
    *,
    long_span_warning_hours: float = DEFAULT_LONG_SPAN_WARNING_HOURS,
) -> WorkSession:
    """Cut a complete session into one segment per calendar date it touches.

    A session without both punches gets no segments. Sessions longer than
    ``long_span_warning_hours`` carry a warning but are still computed.
    """
    if not session.is_complete:
        return session

    start = session.check_in.timestamp
    end = session.check_out.timestamp
    segments: list[SessionSegment] = []
    cursor = start
    while cursor < end:
        midnight = datetime.combine(cursor.date() + timedelta(days=1), time(0, 0))
        seg_end = min(midnight, end)
        segments.append(SessionSegment(work_date=cursor.date(), start=cursor, end=seg_end))
        cursor = seg_end

    warnings = list(session.warnings)
    if session.span_hours > long_span_warning_hours:
        msg = (
            f"User {session.user_id} {session.work_date}: session spans "
            f"{session.span_hours:.1f}h ({start:%m-%d %H:%M} -> {end:%m-%d %H:%M})"
        )
        logger.warning(msg)
        warnings.append(msg)

    return replace(session, segments=tuple(segments), warnings=tuple(warnings))
