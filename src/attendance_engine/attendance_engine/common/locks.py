from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Hashable, Iterator


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLocks:
    """One lock per key (e.g. ``(user_id, work_date)``).

    Serializes punch writes and summary recomputation touching the same key
    inside one process; different keys proceed in parallel. A key's lock is
    dropped once nobody holds or waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]
