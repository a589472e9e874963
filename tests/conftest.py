from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ttlstore import Cache, CacheConfig  # noqa: E402


class FakeClock:
    """Manual nanosecond clock."""

    def __init__(self, start: int = 1_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1_000_000_000)


@pytest.fixture()
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Freeze every module that reads the clock."""

    c = FakeClock()
    monkeypatch.setattr("ttlstore.time.now_ns", c)
    monkeypatch.setattr("ttlstore.cache.now_ns", c)
    monkeypatch.setattr("ttlstore.evictor.now_ns", c)
    return c


@pytest.fixture()
def make_cache() -> Iterator[Callable[..., Cache[Any]]]:
    """Factory that closes every cache it built at teardown."""

    built: list[Cache[Any]] = []

    def _make(**kwargs: Any) -> Cache[Any]:
        c: Cache[Any] = Cache(CacheConfig(**kwargs))
        built.append(c)
        return c

    yield _make
    for c in built:
        c.close()


@pytest.fixture()
def cache(make_cache: Callable[..., Cache[Any]]) -> Cache[Any]:
    return make_cache()
