from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import LeaveKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ApprovedLeave
from .repository import LeaveApprovalStore


class MySQLLeaveApprovalStore(LeaveApprovalStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_approved_leave(self, user_id: int, leave_date: date) -> Optional[ApprovedLeave]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, leave_type, leave_kind
                FROM leave_approvals
                WHERE user_id=%s AND %s BETWEEN start_date AND end_date AND status='APPROVED'
                ORDER BY created_at DESC, leave_id DESC
                LIMIT 1
                """,
                (int(user_id), leave_date),
            )
            row = fetchone(cur)
            if not row:
                return None
            return ApprovedLeave(
                user_id=int(row["user_id"]),
                leave_date=leave_date,
                leave_type=row["leave_type"],
                kind=LeaveKind(row.get("leave_kind") or LeaveKind.FULL_DAY.value),
            )
