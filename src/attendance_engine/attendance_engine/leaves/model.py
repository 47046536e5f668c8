from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import LeaveKind


@dataclass(frozen=True)
class ApprovedLeave:
    """An approved leave covering one day for one user."""

    user_id: int
    leave_date: date
    leave_type: str
    kind: LeaveKind = LeaveKind.FULL_DAY
