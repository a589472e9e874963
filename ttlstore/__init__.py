"""ttlstore — in-process key-value cache with per-entry TTL.

Reads expire passively. An optional background evictor reclaims what
readers already ignore.
"""

from __future__ import annotations

from .cache import Cache, new
from .config import CacheConfig, CacheSettings
from .entry import Entry
from .exceptions import ConfigurationError, KeyExistsError, TTLStoreError

__all__ = [
    "__version__",
    "Cache",
    "CacheConfig",
    "CacheSettings",
    "ConfigurationError",
    "Entry",
    "KeyExistsError",
    "TTLStoreError",
    "new",
]

__version__ = "1.0.0"
