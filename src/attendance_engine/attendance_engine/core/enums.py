from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization on the HTTP layer."""

    ADMIN = "admin"
    STAFF = "staff"


class PunchKind(str, Enum):
    """Normalized direction of a punch stored in the database."""

    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"


class PunchSource(str, Enum):
    TERMINAL = "TERMINAL"
    WEB = "WEB"
    MANUAL = "MANUAL"


class DayType(str, Enum):
    """Day classification, listed in resolution priority order."""

    LEAVE = "LEAVE"
    HOLIDAY = "HOLIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"
    WEEKDAY = "WEEKDAY"


class WorkStatus(str, Enum):
    """Materialized status of a daily work summary."""

    NORMAL = "NORMAL"
    CHECKOUT_MISSING = "CHECKOUT_MISSING"
    CHECKIN_MISSING = "CHECKIN_MISSING"
    NO_RECORD = "NO_RECORD"
    PAID_REST_DAY = "PAID_REST_DAY"
    LEAVE = "LEAVE"


class RejectReason(str, Enum):
    """Why a raw punch row was not turned into a PunchRecord."""

    UNMATCHED_IDENTITY = "UNMATCHED_IDENTITY"
    MALFORMED_TIMESTAMP = "MALFORMED_TIMESTAMP"
    FUTURE_TIMESTAMP = "FUTURE_TIMESTAMP"
    UNCLASSIFIED_PUNCH = "UNCLASSIFIED_PUNCH"


class IdentityMatch(str, Enum):
    USER_ID = "USER_ID"
    EMPLOYEE_NUMBER = "EMPLOYEE_NUMBER"
    NAME = "NAME"


class LeaveKind(str, Enum):
    FULL_DAY = "FULL_DAY"
    HALF_DAY = "HALF_DAY"
