from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import PunchRecord


class PunchRepository(Protocol):
    """Store of persisted punches keyed by ``(user_id, timestamp, kind)``."""

    def insert(self, record: PunchRecord) -> int:
        """Atomic conditional insert.

        Raises PersistenceConflict when the key already exists and
        PersistenceFailure for any other store error.
        """

        raise NotImplementedError

    def replace(self, record: PunchRecord) -> bool:
        """Delete any record with the same key and insert ``record`` in one transaction.

        Returns True when an existing record was replaced.
        """

        raise NotImplementedError

    def list_for_user_dates(self, user_id: int, start: date, end: date) -> Sequence[PunchRecord]:
        """Punches whose work_date is within [start, end], ascending by timestamp."""

        raise NotImplementedError

    def dates_with_punches(self, user_id: int, start: date, end: date) -> Sequence[date]:
        raise NotImplementedError
