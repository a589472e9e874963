"""ttlstore.dispatch

Observer delivery for hit, miss and evict.

Default delivery is synchronous: a slow callback slows the get, the delete,
or the sweep that fired it. `thread` mode hands callbacks to a single worker
so they run in submission order off the hot path.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from ttlstore.config import CacheConfig

logger = logging.getLogger(__name__)


class CallbackDispatcher:
    """Routes cache events to the configured callbacks."""

    def __init__(self, config: CacheConfig):
        self._on_evict = config.on_evict
        self._on_hit = config.on_hit
        self._on_miss = config.on_miss
        self._guard = config.guard_callbacks
        self._executor: ThreadPoolExecutor | None = None
        if config.callback_mode == "thread":
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ttlstore-callbacks")

    @property
    def threaded(self) -> bool:
        return self._executor is not None

    def evict(self, key: str, value: Any) -> None:
        if self._on_evict is not None:
            self._dispatch("on_evict", self._on_evict, key, value)

    def hit(self, key: str, entry: Any) -> None:
        if self._on_hit is not None:
            self._dispatch("on_hit", self._on_hit, key, entry)

    def miss(self, key: str) -> None:
        if self._on_miss is not None:
            self._dispatch("on_miss", self._on_miss, key)

    def close(self) -> None:
        executor, self._executor = self._executor, None
        if executor is not None:
            # Queued callbacks still run; close() may be called from the worker itself.
            executor.shutdown(wait=False)

    def _dispatch(self, name: str, fn: Callable[..., None], *args: Any) -> None:
        executor = self._executor
        if executor is not None:
            try:
                fut = executor.submit(fn, *args)
            except RuntimeError:
                # Executor shut down between the check and the submit.
                self._invoke(name, fn, *args)
                return
            fut.add_done_callback(lambda f: self._log_failure(name, f))
            return
        self._invoke(name, fn, *args)

    def _invoke(self, name: str, fn: Callable[..., None], *args: Any) -> None:
        if not self._guard:
            fn(*args)
            return
        try:
            fn(*args)
        except Exception:
            logger.exception("cache callback %s failed for key %r", name, args[0])

    @staticmethod
    def _log_failure(name: str, fut: Future) -> None:
        exc = fut.exception()
        if exc is not None:
            logger.error("cache callback %s failed", name, exc_info=exc)
