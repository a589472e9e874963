"""ttlstore.exceptions

Errors are part of the interface.

Absence is not an error. A miss is reported through the found flag.
"""

from __future__ import annotations


class TTLStoreError(Exception):
    """Base exception for ttlstore."""


class ConfigurationError(TTLStoreError):
    """Configuration is missing, invalid, or inconsistent."""


class KeyExistsError(TTLStoreError, KeyError):
    """A live entry already exists for the key."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"entry {self.key} already exists"
