from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class UserDirectory(Protocol):
    """Read-only user directory used for identity resolution.

    Note (DIP): the normalizer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_employee_number(self, employee_number: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_name(self, full_name: str) -> Optional[Employee]:
        raise NotImplementedError

