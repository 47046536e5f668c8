from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import IdentityMatch, PunchKind, PunchSource


@dataclass(frozen=True)
class RawPunchRow:
    """One row as delivered by an ingestion adapter (CSV export, web form, manual entry)."""

    line_no: int
    date_text: str
    time_text: str
    source: PunchSource = PunchSource.TERMINAL
    user_id: Optional[int] = None
    employee_number: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    mode: Optional[str] = None
    terminal_id: Optional[str] = None
    had_dinner: Optional[bool] = None
    location_text: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class PunchRecord:
    """Domain entity: one persisted check-in/check-out event.

    Immutable once persisted; only an explicit overwrite replaces it.
    """

    user_id: int
    work_date: date
    local_time: time
    timestamp: datetime
    kind: PunchKind
    source: PunchSource
    employee_number: Optional[str] = None
    had_dinner: bool = False
    terminal_id: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    note: Optional[str] = None
    punch_id: Optional[int] = None

    @property
    def key(self) -> tuple[int, datetime, PunchKind]:
        return (self.user_id, self.timestamp, self.kind)

    @property
    def is_check_in(self) -> bool:
        return self.kind == PunchKind.CHECK_IN

    @property
    def is_check_out(self) -> bool:
        return self.kind == PunchKind.CHECK_OUT


@dataclass(frozen=True)
class NormalizedPunch:
    record: PunchRecord
    matched_by: IdentityMatch
    line_no: int
