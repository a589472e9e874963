from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any

import pytest

from ttlstore.config import CacheConfig
from ttlstore.dispatch import CallbackDispatcher


def test_unset_callbacks_are_noops() -> None:
    d = CallbackDispatcher(CacheConfig())
    d.evict("k", 1)
    d.hit("k", object())
    d.miss("k")
    assert not d.threaded


def test_thread_mode_delivers_off_the_calling_thread() -> None:
    q: queue.Queue[tuple[str, str]] = queue.Queue()
    d = CallbackDispatcher(
        CacheConfig(callback_mode="thread", on_miss=lambda k: q.put((k, threading.current_thread().name)))
    )
    try:
        assert d.threaded
        d.miss("a")
        key, thread_name = q.get(timeout=2)
        assert key == "a"
        assert thread_name.startswith("ttlstore-callbacks")
        assert thread_name != threading.current_thread().name
    finally:
        d.close()


def test_thread_mode_preserves_submission_order() -> None:
    seen: list[str] = []
    done = threading.Event()

    def on_evict(key: str, value: Any) -> None:
        seen.append(key)
        if key == "k49":
            done.set()

    d = CallbackDispatcher(CacheConfig(callback_mode="thread", on_evict=on_evict))
    try:
        for i in range(50):
            d.evict(f"k{i}", i)
        assert done.wait(timeout=2)
        assert seen == [f"k{i}" for i in range(50)]
    finally:
        d.close()


def test_thread_mode_logs_callback_failures(caplog: pytest.LogCaptureFixture) -> None:
    def boom(key: str) -> None:
        raise ValueError("nope")

    d = CallbackDispatcher(CacheConfig(callback_mode="thread", on_miss=boom))
    with caplog.at_level(logging.ERROR, logger="ttlstore.dispatch"):
        d.miss("a")
        deadline = time.monotonic() + 2
        while "on_miss" not in caplog.text and time.monotonic() < deadline:
            time.sleep(0.01)
        d.close()
    assert "cache callback on_miss failed" in caplog.text


def test_after_close_callbacks_run_inline() -> None:
    names: list[str] = []
    d = CallbackDispatcher(
        CacheConfig(callback_mode="thread", on_miss=lambda k: names.append(threading.current_thread().name))
    )
    d.close()
    d.close()
    d.miss("a")
    assert names == [threading.current_thread().name]
