"""ttlstore.evictor

Active expiry.

Passive expiry hides stale entries from readers. The evictor is what
actually reclaims them: every tick it walks a snapshot of the store and
deletes what has expired, through the cache's own delete path so that
`on_evict` fires.
"""

from __future__ import annotations

import logging
import threading
import weakref
from typing import TYPE_CHECKING

from ttlstore.time import now_ns

if TYPE_CHECKING:
    from ttlstore.cache import Cache

logger = logging.getLogger(__name__)


class Evictor:
    """Background sweeper bound to one cache.

    Holds only a weak reference, so a cache dropped without `close()` still
    lets the thread exit at the next tick.
    """

    def __init__(self, cache: Cache, interval_s: float):
        if interval_s <= 0:
            raise ValueError(f"interval_s must be > 0, got {interval_s}")
        self.interval_s = float(interval_s)
        self._cache_ref = weakref.ref(cache)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        t = self._thread
        return t is not None and t.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="ttlstore-evictor", daemon=True)
        self._thread.start()
        logger.debug("evictor started interval_s=%s", self.interval_s)

    def stop(self, timeout: float | None = 2.0) -> None:
        """Signal the loop to exit. Idempotent; safe from the evictor thread."""

        if self._stop.is_set():
            return
        self._stop.set()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout=timeout)
        logger.debug("evictor stopped")

    def sweep(self) -> int:
        """Delete every expired entry once. Returns how many were removed."""

        cache = self._cache_ref()
        if cache is None:
            return 0
        return sweep_expired(cache)

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            cache = self._cache_ref()
            if cache is None:
                logger.debug("evictor exiting: cache was collected")
                return
            try:
                removed = sweep_expired(cache)
            except Exception:
                # No caller to hand this to; keep sweeping.
                logger.exception("evict sweep failed")
                continue
            finally:
                del cache
            if removed:
                logger.debug("evictor removed %d stale entries", removed)


def sweep_expired(cache: Cache) -> int:
    now = now_ns()
    removed = 0
    for key, entry in cache.raw_items():
        if entry.is_expired(now) and cache.delete_entry(key, entry):
            removed += 1
    return removed
