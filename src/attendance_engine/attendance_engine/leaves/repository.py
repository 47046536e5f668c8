from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import ApprovedLeave


class LeaveApprovalStore(Protocol):
    """Approved-leave lookup (external collaborator, read-only)."""

    def get_approved_leave(self, user_id: int, leave_date: date) -> Optional[ApprovedLeave]:
        raise NotImplementedError
