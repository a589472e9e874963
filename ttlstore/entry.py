"""ttlstore.entry

The stored unit: a caller value and the moment it stops being true.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from ttlstore.time import NEVER

V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class Entry(Generic[V]):
    value: V
    expiration: int = NEVER

    @property
    def never_expires(self) -> bool:
        return self.expiration == NEVER

    def is_expired(self, now: int) -> bool:
        """True once `now` has reached a nonzero expiration."""

        return self.expiration != NEVER and now >= self.expiration

    def remaining_s(self, now: int) -> float | None:
        if self.never_expires:
            return None
        return max(0.0, (self.expiration - now) / 1_000_000_000)
