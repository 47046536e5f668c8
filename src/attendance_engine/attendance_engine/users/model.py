from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an entry of the user directory.

    Note: plain data object (no DB access code).
    """

    user_id: int
    full_name: str
    employee_number: Optional[str] = None
    is_active: bool = True
