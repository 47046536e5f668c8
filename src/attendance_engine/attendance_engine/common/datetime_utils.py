from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")
_DOTTED_DATE = re.compile(r"^(\d{4})\.\s*(\d{1,2})\.\s*(\d{1,2})\.?$")
_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_MERIDIEM_PREFIX = re.compile(r"^(오전|오후|a\.?m\.?|p\.?m\.?)\s*", re.IGNORECASE)
_MERIDIEM_SUFFIX = re.compile(r"\s*(a\.?m\.?|p\.?m\.?)$", re.IGNORECASE)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_punch_date(value: str) -> date:
    """Parse a terminal/export date: ``YYYY-MM-DD``, ``YYYY/MM/DD`` or ``YYYY. M. D.``."""
    text = (value or "").strip()
    m = _ISO_DATE.match(text) or _DOTTED_DATE.match(text)
    if not m:
        raise ValueError(f"Unrecognized date: {value!r}")
    return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _is_pm(marker: str) -> bool:
    return marker == "오후" or marker.lower().startswith("p")


def parse_punch_time(value: str) -> time:
    """Parse a 24-hour or 12-hour clock string.

    Accepts ``HH:MM[:SS]``, a meridiem word prefix (``오전 9:05:00``,
    ``PM 6:30``) or an AM/PM suffix (``6:30:00 PM``). An hour of 13 or more
    next to a meridiem marker is taken as already 24-hour.
    """
    text = (value or "").strip()
    marker = None

    m = _MERIDIEM_PREFIX.match(text)
    if m:
        marker = m.group(1)
        text = text[m.end():]
    else:
        m = _MERIDIEM_SUFFIX.search(text)
        if m:
            marker = m.group(1)
            text = text[: m.start()]

    m = _CLOCK.match(text.strip())
    if not m:
        raise ValueError(f"Unrecognized time: {value!r}")

    hour, minute, second = int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)

    if marker is not None:
        if hour >= 13:
            logger.warning("Meridiem marker %r ignored for 24-hour value %r", marker, value)
        elif _is_pm(marker) and hour < 12:
            hour += 12
        elif not _is_pm(marker) and hour == 12:
            hour = 0

    if hour > 23 or minute > 59 or second > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return time(hour, minute, second)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def round_hours(value: float) -> float:
    """Final one-decimal rounding (half away from zero) of an hour value."""
    sign = -1 if value < 0 else 1
    return sign * int(abs(value) * 10 + 0.5 + 1e-9) / 10


def month_key(d: date) -> str:
    return d.strftime("%Y-%m")


def month_bounds(work_month: str) -> tuple[date, date]:
    """First and last day of a ``YYYY-MM`` month."""
    first = datetime.strptime(work_month, "%Y-%m").date()
    nxt = (first.replace(day=28) + timedelta(days=4)).replace(day=1)
    return first, nxt - timedelta(days=1)


def following_sunday(d: date) -> date:
    return d + timedelta(days=(6 - d.weekday()))
