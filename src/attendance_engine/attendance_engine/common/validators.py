from __future__ import annotations

from typing import Iterable

from ..core.exceptions import BatchFormatError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_columns(header: Iterable[str], required: Iterable[str]) -> None:
    present = {h.strip() for h in header if h}
    missing = [c for c in required if c not in present]
    if missing:
        raise BatchFormatError(f"Missing required column(s): {', '.join(missing)}")
