from __future__ import annotations

from typing import Protocol, Sequence

from .model import FlexibleWorkPeriod


class FlexibleWorkPeriodStore(Protocol):
    """Flexible-work-period configuration (external collaborator, read-only)."""

    def list_periods(self) -> Sequence[FlexibleWorkPeriod]:
        raise NotImplementedError
