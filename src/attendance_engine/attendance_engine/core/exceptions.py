from __future__ import annotations

from .enums import RejectReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class BatchFormatError(DomainError):
    """Raised when an uploaded batch cannot be read as a batch at all (bad header, empty file)."""


class PunchRejected(DomainError):
    """A single raw punch row could not be normalized. Never aborts a batch."""

    def __init__(self, reason: RejectReason, message: str):
        super().__init__(message)
        self.reason = reason


class PersistenceConflict(DomainError):
    """Unique-key violation on insert; callers treat it as a duplicate."""


class PersistenceFailure(DomainError):
    """Any other store error while writing a single record."""
