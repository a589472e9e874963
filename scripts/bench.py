#!/usr/bin/env python3
"""Parallel set/get micro-benchmark.

Usage: python scripts/bench.py --threads 4 --ops 100000
"""

from __future__ import annotations

import argparse
import sys
import threading
import time
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from ttlstore import Cache, CacheConfig  # noqa: E402


def _run(name: str, threads: int, ops: int, fn) -> None:
    workers = [threading.Thread(target=fn, args=(ops,)) for _ in range(threads)]
    start = time.perf_counter()
    for w in workers:
        w.start()
    for w in workers:
        w.join()
    elapsed = time.perf_counter() - start
    total = threads * ops
    print(f"{name:<4} {total:>10} ops  {elapsed * 1e9 / total:>8.1f} ns/op")


def main() -> int:
    parser = argparse.ArgumentParser(description="ttlstore set/get benchmark")
    parser.add_argument("--threads", type=int, default=4)
    parser.add_argument("--ops", type=int, default=100_000)
    args = parser.parse_args()

    cache: Cache[str] = Cache(CacheConfig())

    def do_set(n: int) -> None:
        for _ in range(n):
            cache.set("k", "v")

    def do_get(n: int) -> None:
        for _ in range(n):
            cache.get("k")

    _run("set", args.threads, args.ops, do_set)
    cache.set("k", "v")
    _run("get", args.threads, args.ops, do_get)
    cache.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
