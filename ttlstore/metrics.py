"""ttlstore.metrics

A tiny metrics surface, fed by the cache callbacks.

No Prometheus dependency here. Just counters that can be scraped later.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

from ttlstore.config import EvictCallback, HitCallback, MissCallback


@dataclass
class Counter:
    name: str
    _value: float = 0.0
    _lock: Lock = field(default_factory=Lock, repr=False)

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value += amount

    @property
    def value(self) -> float:
        with self._lock:
            return float(self._value)


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[str, Counter] = {}

    def counter(self, name: str) -> Counter:
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(name=name)
            return self._counters[name]

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            return {f"counter.{k}": v.value for k, v in self._counters.items()}


@dataclass(frozen=True, slots=True)
class CacheStats:
    hits: int
    misses: int
    evictions: int

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        total = self.total_requests
        return self.hits / total if total else 0.0


def instrument(
    registry: MetricsRegistry,
    *,
    prefix: str = "cache",
    on_evict: EvictCallback | None = None,
    on_hit: HitCallback | None = None,
    on_miss: MissCallback | None = None,
) -> dict[str, Callable[..., None]]:
    """Build callback kwargs for CacheConfig that count hits, misses and evictions.

    Callbacks passed in are chained after the counter update.
    """

    hits = registry.counter(f"{prefix}.hits")
    misses = registry.counter(f"{prefix}.misses")
    evictions = registry.counter(f"{prefix}.evictions")

    def _hit(key: str, entry: Any) -> None:
        hits.inc()
        if on_hit is not None:
            on_hit(key, entry)

    def _miss(key: str) -> None:
        misses.inc()
        if on_miss is not None:
            on_miss(key)

    def _evict(key: str, value: Any) -> None:
        evictions.inc()
        if on_evict is not None:
            on_evict(key, value)

    return {"on_hit": _hit, "on_miss": _miss, "on_evict": _evict}


def stats(registry: MetricsRegistry, *, prefix: str = "cache") -> CacheStats:
    return CacheStats(
        hits=int(registry.counter(f"{prefix}.hits").value),
        misses=int(registry.counter(f"{prefix}.misses").value),
        evictions=int(registry.counter(f"{prefix}.evictions").value),
    )
