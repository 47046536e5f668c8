from __future__ import annotations

from typing import Iterable

from .model import NormalizedPunch


def sort_chronologically(punches: Iterable[NormalizedPunch]) -> list[NormalizedPunch]:
    """Stable sort by timestamp; equal timestamps keep input order."""
    return sorted(punches, key=lambda p: p.record.timestamp)


def dedupe_in_batch(punches: Iterable[NormalizedPunch]) -> tuple[list[NormalizedPunch], int]:
    """Collapse punches sharing ``(user_id, timestamp, kind)`` to the first occurrence.

    Returns the surviving punches in chronological order and the number dropped.
    """
    seen: set = set()
    unique: list[NormalizedPunch] = []
    dropped = 0
    for p in sort_chronologically(punches):
        if p.record.key in seen:
            dropped += 1
            continue
        seen.add(p.record.key)
        unique.append(p)
    return unique, dropped
