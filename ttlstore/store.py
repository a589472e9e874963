"""ttlstore.store

Concurrent key -> Entry map.

Every per-key operation is atomic under one lock. Iteration goes through
`snapshot()`, so a sweep never walks a dict that another thread is resizing.
"""

from __future__ import annotations

import threading
from typing import Any

from ttlstore.entry import Entry


class ConcurrentMap:
    """Thread-safe mapping from string key to Entry."""

    def __init__(self) -> None:
        self._data: dict[str, Entry[Any]] = {}
        self._lock = threading.Lock()

    def load(self, key: str) -> Entry[Any] | None:
        with self._lock:
            return self._data.get(key)

    def store(self, key: str, entry: Entry[Any]) -> None:
        with self._lock:
            self._data[key] = entry

    def load_and_delete(self, key: str) -> Entry[Any] | None:
        with self._lock:
            return self._data.pop(key, None)

    def store_if_vacant(self, key: str, entry: Entry[Any], *, now: int) -> bool:
        """Store `entry` unless a live entry already holds `key`."""

        with self._lock:
            current = self._data.get(key)
            if current is not None and not current.is_expired(now):
                return False
            self._data[key] = entry
            return True

    def delete_if_current(self, key: str, entry: Entry[Any]) -> bool:
        """Remove `key` only while it still maps to this exact entry."""

        with self._lock:
            if self._data.get(key) is not entry:
                return False
            del self._data[key]
            return True

    def snapshot(self) -> list[tuple[str, Entry[Any]]]:
        with self._lock:
            return list(self._data.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data
