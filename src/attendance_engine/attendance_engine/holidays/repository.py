from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import Holiday


class HolidayCalendar(Protocol):
    """Public-holiday lookup (external collaborator, read-only)."""

    def get_holiday(self, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError
