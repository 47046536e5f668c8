from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from ..common.datetime_utils import parse_punch_date, parse_punch_time
from ..common.geo import parse_location_text
from ..core.constants import DEFAULT_FUTURE_TOLERANCE_MINUTES, DEFAULT_IGNORED_PUNCH_CATEGORIES
from ..core.enums import IdentityMatch, PunchKind, PunchSource, RejectReason
from ..core.exceptions import PunchRejected
from ..users.model import Employee
from ..users.repository import UserDirectory
from .model import NormalizedPunch, PunchRecord, RawPunchRow

logger = logging.getLogger(__name__)

# Terminal "unlock" means somebody arrived, "set/lock" means the last one left.
CHECK_IN_TOKENS = frozenset({"출근", "해제", "CHECKIN", "CHECK_IN", "IN", "UNLOCK", "SETUNLOCK"})
CHECK_OUT_TOKENS = frozenset({"퇴근", "세트", "CHECKOUT", "CHECK_OUT", "OUT", "LOCK", "SET", "SETLOCK"})


def _token(value: Optional[str]) -> str:
    return "".join((value or "").split()).replace("-", "_").upper()


class PunchNormalizer:
    """Turn a RawPunchRow into a canonical PunchRecord.

    ``normalize`` returns None for rows whose category is configured as
    ignored (pass-through access, general events) and raises PunchRejected
    for rows that cannot be used. Mode takes precedence over category.
    """

    def __init__(
        self,
        directory: UserDirectory,
        *,
        ignored_categories: Iterable[str] = DEFAULT_IGNORED_PUNCH_CATEGORIES,
        future_tolerance_minutes: int = DEFAULT_FUTURE_TOLERANCE_MINUTES,
    ):
        self._directory = directory
        self._ignored = frozenset(_token(c) for c in ignored_categories)
        self._future_tolerance = timedelta(minutes=int(future_tolerance_minutes))

    def classify(self, mode: Optional[str], category: Optional[str]) -> Optional[PunchKind]:
        for value in (mode, category):
            tok = _token(value)
            if not tok:
                continue
            if tok in CHECK_IN_TOKENS:
                return PunchKind.CHECK_IN
            if tok in CHECK_OUT_TOKENS:
                return PunchKind.CHECK_OUT
            if tok in self._ignored:
                return None
        raise PunchRejected(
            RejectReason.UNCLASSIFIED_PUNCH,
            f"unrecognized punch mode/category {mode!r}/{category!r}",
        )

    def resolve_identity(self, raw: RawPunchRow) -> tuple[Employee, IdentityMatch]:
        if raw.user_id is not None:
            emp = self._directory.get_by_id(int(raw.user_id))
            if emp:
                return emp, IdentityMatch.USER_ID

        number = (raw.employee_number or "").strip()
        if number:
            emp = self._directory.get_by_employee_number(number)
            if emp:
                return emp, IdentityMatch.EMPLOYEE_NUMBER

        name = (raw.name or "").strip()
        if name:
            emp = self._directory.get_by_name(name)
            if emp:
                return emp, IdentityMatch.NAME

        raise PunchRejected(
            RejectReason.UNMATCHED_IDENTITY,
            f"no user for employee number {number or '-'} / name {name or '-'}",
        )

    def normalize(self, raw: RawPunchRow, *, now: datetime) -> Optional[NormalizedPunch]:
        kind = self.classify(raw.mode, raw.category)
        if kind is None:
            logger.info("Line %s: ignored punch category %r/%r", raw.line_no, raw.mode, raw.category)
            return None

        employee, matched_by = self.resolve_identity(raw)

        try:
            work_date = parse_punch_date(raw.date_text)
            local_time = parse_punch_time(raw.time_text)
        except ValueError as e:
            raise PunchRejected(RejectReason.MALFORMED_TIMESTAMP, str(e)) from e

        timestamp = datetime.combine(work_date, local_time)
        if timestamp > now + self._future_tolerance:
            raise PunchRejected(
                RejectReason.FUTURE_TIMESTAMP,
                f"timestamp {timestamp:%Y-%m-%d %H:%M:%S} is in the future",
            )

        lat = lng = None
        if raw.source == PunchSource.WEB:
            point = parse_location_text(raw.location_text)
            if point:
                lat, lng = point.lat, point.lng

        record = PunchRecord(
            user_id=employee.user_id,
            employee_number=employee.employee_number,
            work_date=work_date,
            local_time=local_time,
            timestamp=timestamp,
            kind=kind,
            source=raw.source,
            had_dinner=bool(raw.had_dinner) if kind == PunchKind.CHECK_OUT else False,
            terminal_id=raw.terminal_id,
            location_lat=lat,
            location_lng=lng,
            note=raw.note,
        )
        return NormalizedPunch(record=record, matched_by=matched_by, line_no=raw.line_no)
