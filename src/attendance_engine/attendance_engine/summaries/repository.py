from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import DailyWorkSummary, MonthlyWorkStats


class SummaryRepository(Protocol):
    """Daily and monthly aggregates. Only the materializer writes here."""

    def get_daily(self, user_id: int, work_date: date) -> Optional[DailyWorkSummary]:
        raise NotImplementedError

    def list_daily(self, user_id: int, start: date, end: date) -> Sequence[DailyWorkSummary]:
        raise NotImplementedError

    def upsert_daily(self, summary: DailyWorkSummary) -> None:
        """Insert, or overwrite every column of the row with the same key."""

        raise NotImplementedError

    def replace_daily(self, summary: DailyWorkSummary) -> None:
        """Delete the row with the same key, then insert."""

        raise NotImplementedError

    def delete_daily(self, user_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def get_monthly(self, user_id: int, work_month: str) -> Optional[MonthlyWorkStats]:
        raise NotImplementedError

    def list_monthly(self, work_month: str, *, user_id: Optional[int] = None) -> Sequence[MonthlyWorkStats]:
        raise NotImplementedError

    def replace_monthly(self, stats: MonthlyWorkStats) -> None:
        raise NotImplementedError

    def delete_monthly(self, user_id: int, work_month: str) -> bool:
        raise NotImplementedError
