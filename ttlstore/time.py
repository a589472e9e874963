"""ttlstore.time

The only clock surface in the package.

Expirations are absolute nanosecond readings of a monotonic clock.
Zero is reserved: it means "never".
"""

from __future__ import annotations

import math
import time
from datetime import timedelta

NEVER = 0

Duration = int | float | timedelta | None


def now_ns() -> int:
    """Return the current monotonic clock reading in nanoseconds."""

    return time.monotonic_ns()


def to_seconds(duration: Duration) -> float:
    """Normalize a duration to float seconds.

    Accepts:
    - int/float seconds
    - `datetime.timedelta`
    - None (treated as zero)

    Raises:
        TypeError: for anything else.
        ValueError: for NaN.
    """

    if duration is None:
        return 0.0
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    if isinstance(duration, bool) or not isinstance(duration, int | float):
        raise TypeError(f"duration must be seconds or timedelta, got {type(duration).__name__}")
    seconds = float(duration)
    if math.isnan(seconds):
        raise ValueError("duration must not be NaN")
    return seconds


def expiration_for(ttl: Duration, *, now: int | None = None) -> int:
    """Absolute expiration for a ttl, or NEVER when ttl <= 0 or infinite."""

    seconds = to_seconds(ttl)
    if seconds <= 0:
        return NEVER
    ttl_ns = seconds * 1_000_000_000
    if math.isinf(ttl_ns):
        return NEVER
    ref = now_ns() if now is None else now
    return ref + int(ttl_ns)
