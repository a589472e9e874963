"""ttlstore.cache

In-memory key-value cache with per-entry TTL.

A read never removes anything: stale entries are simply reported as misses.
Physical removal belongs to `delete` and to the evictor.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from ttlstore.config import CacheConfig
from ttlstore.dispatch import CallbackDispatcher
from ttlstore.entry import Entry
from ttlstore.evictor import Evictor
from ttlstore.exceptions import KeyExistsError
from ttlstore.store import ConcurrentMap
from ttlstore.time import Duration, expiration_for, now_ns

logger = logging.getLogger(__name__)

V = TypeVar("V")
D = TypeVar("D")


class Cache(Generic[V]):
    """Thread-safe TTL cache.

    Get/Set/Add/Delete may be called from any number of threads without
    external locking. Callbacks run inline unless `callback_mode="thread"`.
    """

    def __init__(self, config: CacheConfig | Mapping[str, Any] | None):
        self.config = CacheConfig.coerce(config)
        self._entries = ConcurrentMap()
        self._flush_lock = threading.Lock()
        self._close_lock = threading.Lock()
        self._closed = False
        self._callbacks = CallbackDispatcher(self.config)
        self._evictor: Evictor | None = None

        if self.config.evict_interval > 0:
            self._evictor = Evictor(self, self.config.evict_interval)
            self._evictor.start()

    def add(self, key: str, value: V, ttl: Duration = 0) -> None:
        """Store `value` only if no live entry holds `key`.

        Expired entries count as absent. The existence check does not fire
        `on_miss` or `on_hit`.

        Raises:
            KeyExistsError: a live entry already exists for `key`.
        """

        now = now_ns()
        entry = Entry(value, expiration_for(ttl, now=now))
        if not self._entries.store_if_vacant(key, entry, now=now):
            raise KeyExistsError(key)

    def set(self, key: str, value: V, ttl: Duration = 0) -> None:
        """Upsert. A ttl of 0 (or less) means the entry never expires."""

        self._entries.store(key, Entry(value, expiration_for(ttl)))

    def get(self, key: str, default: D | None = None) -> tuple[V | D | None, bool]:
        """Return `(value, True)` for a live entry, else `(default, False)`."""

        entry = self._entries.load(key)
        if entry is None or entry.is_expired(now_ns()):
            self._callbacks.miss(key)
            return default, False

        self._callbacks.hit(key, entry)
        return entry.value, True

    def delete(self, key: str) -> bool:
        """Remove `key` if present and fire `on_evict` once. Idempotent."""

        entry = self._entries.load_and_delete(key)
        if entry is None:
            return False
        self._callbacks.evict(key, entry.value)
        return True

    def delete_entry(self, key: str, entry: Entry[V]) -> bool:
        """Remove `key` only while it still holds `entry`.

        Used by the evictor so a value stored after the sweep snapshot
        survives.
        """

        if not self._entries.delete_if_current(key, entry):
            return False
        self._callbacks.evict(key, entry.value)
        return True

    def flush(self) -> None:
        """Discard every entry.

        Swaps in a fresh store. A `set` racing a flush may land in either
        store. `on_evict` fires for discarded entries only when
        `evict_on_flush` is configured.
        """

        with self._flush_lock:
            old, self._entries = self._entries, ConcurrentMap()

        logger.debug("cache flushed entries=%d", len(old))
        if self.config.evict_on_flush:
            for key, entry in old.snapshot():
                self._callbacks.evict(key, entry.value)

    def ttl(self, key: str) -> float | None:
        """Remaining seconds for a live entry; None if absent or never expiring."""

        entry = self._entries.load(key)
        now = now_ns()
        if entry is None or entry.is_expired(now):
            return None
        return entry.remaining_s(now)

    def keys(self) -> list[str]:
        now = now_ns()
        return [k for k, e in self._entries.snapshot() if not e.is_expired(now)]

    def raw_items(self) -> list[tuple[str, Entry[V]]]:
        """Everything stored, stale entries included."""

        return self._entries.snapshot()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sweeping(self) -> bool:
        return self._evictor is not None and self._evictor.running

    def close(self) -> None:
        """Stop background sweeping and callback delivery. Idempotent."""

        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        if self._evictor is not None:
            self._evictor.stop()
        self._callbacks.close()
        logger.debug("cache closed")

    def __enter__(self) -> Cache[V]:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        entry = self._entries.load(key)
        return entry is not None and not entry.is_expired(now_ns())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"Cache(entries={len(self)}, evict_interval={self.config.evict_interval}, "
            f"closed={self._closed})"
        )


def new(config: CacheConfig | Mapping[str, Any] | None) -> Cache[Any]:
    """Build a cache; raises ConfigurationError when `config` is missing or invalid."""

    return Cache(config)
