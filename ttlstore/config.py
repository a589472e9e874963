"""ttlstore.config

Two config surfaces:
1) `CacheConfig`, built in code, carries callbacks
2) `CacheSettings`, scalar tunables from YAML or `TTLSTORE_*` environment variables

Callbacks never come from files.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ttlstore.exceptions import ConfigurationError
from ttlstore.time import to_seconds

EvictCallback = Callable[[str, Any], None]
HitCallback = Callable[[str, Any], None]
MissCallback = Callable[[str], None]

CallbackMode = Literal["sync", "thread"]


def _interval_seconds(v: Any) -> float:
    try:
        seconds = to_seconds(v)
    except TypeError as e:
        raise ValueError(str(e)) from e
    if not math.isfinite(seconds) or seconds > threading.TIMEOUT_MAX:
        raise ValueError(f"evict_interval must be finite and <= {threading.TIMEOUT_MAX}, got {seconds}")
    if seconds < 0:
        raise ValueError(f"evict_interval must be >= 0, got {seconds}")
    return seconds


class CacheConfig(BaseModel):
    """Construction-time configuration. Every field is optional."""

    model_config = ConfigDict(frozen=True)

    # Seconds between sweeps of stale entries. 0 disables the evictor.
    evict_interval: float = 0.0
    on_evict: EvictCallback | None = None
    on_hit: HitCallback | None = None
    on_miss: MissCallback | None = None

    evict_on_flush: bool = False
    callback_mode: CallbackMode = "sync"
    guard_callbacks: bool = False

    @field_validator("evict_interval", mode="before")
    @classmethod
    def evict_interval_non_negative(cls, v: Any) -> float:
        return _interval_seconds(v)

    @field_validator("on_evict", "on_hit", "on_miss")
    @classmethod
    def must_be_callable(cls, v: Any) -> Any:
        if v is not None and not callable(v):
            raise ValueError(f"callback must be callable, got {type(v).__name__}")
        return v

    @classmethod
    def coerce(cls, value: CacheConfig | Mapping[str, Any] | None) -> CacheConfig:
        """Accept a CacheConfig or a mapping of its fields."""

        if value is None:
            raise ConfigurationError("must pass a configuration")
        if isinstance(value, CacheConfig):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(**dict(value))
            except ValidationError as e:
                raise ConfigurationError(f"invalid cache configuration: {e}") from e
        raise ConfigurationError(f"configuration must be CacheConfig or mapping, got {type(value).__name__}")


class CacheSettings(BaseSettings):
    """Scalar tunables. Environment overrides use the TTLSTORE_ prefix."""

    evict_interval: float = 0.0
    evict_on_flush: bool = False
    callback_mode: CallbackMode = "sync"
    guard_callbacks: bool = False

    model_config = SettingsConfigDict(env_prefix="TTLSTORE_")

    @field_validator("evict_interval", mode="before")
    @classmethod
    def evict_interval_non_negative(cls, v: Any) -> float:
        if isinstance(v, str):
            v = float(v)
        return _interval_seconds(v)

    @classmethod
    def from_yaml(cls, path: Path) -> CacheSettings:
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Config file is not valid YAML: {path}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file must hold a mapping: {path}")

        # Allow the settings to live under a `cache:` section.
        section = raw.get("cache", raw)
        if not isinstance(section, dict):
            raise ConfigurationError(f"cache section must hold a mapping: {path}")
        try:
            return cls(**section)
        except ValidationError as e:
            raise ConfigurationError(f"invalid cache settings in {path}: {e}") from e

    def to_config(
        self,
        *,
        on_evict: EvictCallback | None = None,
        on_hit: HitCallback | None = None,
        on_miss: MissCallback | None = None,
    ) -> CacheConfig:
        return CacheConfig(
            evict_interval=self.evict_interval,
            evict_on_flush=self.evict_on_flush,
            callback_mode=self.callback_mode,
            guard_callbacks=self.guard_callbacks,
            on_evict=on_evict,
            on_hit=on_hit,
            on_miss=on_miss,
        )
