"""Configuration models for kv-sessions.

All settings are Pydantic models so that values read from YAML files or
plain mappings are validated once, at setup time.

Classes
-------
- ReconnectPolicy  — backoff and retry budget for the Redis handshake
- RedisConfig      — how to reach the Redis server
- SessionConfig    — top-level settings consumed by ``kv_sessions.create``
"""
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from kv_sessions.errors import ConfigurationError

DEFAULT_EXPIRATION_MINUTES: int = 15


class ReconnectPolicy(BaseModel):
    """Linear backoff used while (re)connecting to the backend.

    Parameters
    ----------
    backoff_step_ms:
        Delay added per failed attempt, in milliseconds.  Default: 100.
    backoff_cap_ms:
        Upper bound for a single delay, in milliseconds.  Default: 3000.
    max_attempts:
        Attempts allowed before giving up.  Default: 20.
    max_total_retry_seconds:
        Wall-clock budget for all retries combined.  Default: one hour.
    """

    backoff_step_ms: int = Field(default=100, gt=0)
    backoff_cap_ms: int = Field(default=3000, gt=0)
    max_attempts: int = Field(default=20, ge=0)
    max_total_retry_seconds: float = Field(default=3600.0, gt=0)

    def compute_delay(self, attempt: int) -> float:
        """Return the delay in seconds to wait before ``attempt``."""
        return min(attempt * self.backoff_step_ms, self.backoff_cap_ms) / 1000.0


class RedisConfig(BaseModel):
    """Connection settings for ``RedisBackend``.

    Parameters
    ----------
    host:
        Redis server hostname.
    port:
        Redis server port.  Defaults to ``6379``.
    db:
        Logical database index.  Defaults to ``0``.
    password:
        Optional authentication password.
    socket_timeout:
        Per-command timeout in seconds.  ``None`` waits indefinitely.
    reconnect:
        Backoff policy for the connection handshake and every reconnect.
    """

    host: str
    port: int = Field(default=6379, ge=1, le=65535)
    db: int = Field(default=0, ge=0)
    password: str | None = None
    socket_timeout: float | None = Field(default=None, gt=0)
    reconnect: ReconnectPolicy = Field(default_factory=ReconnectPolicy)


class SessionConfig(BaseModel):
    """Settings for a session manager.

    Parameters
    ----------
    expiration_enabled:
        When True (default) every saved session gets a TTL.
    expiration_in_minutes:
        Session lifetime since the last save or validation.  Default: 15.
    redis:
        Connection settings.  Required unless a client or backend is
        passed to ``kv_sessions.create`` directly.
    """

    expiration_enabled: bool = True
    expiration_in_minutes: int = Field(default=DEFAULT_EXPIRATION_MINUTES, gt=0)
    redis: RedisConfig | None = None

    @property
    def ttl_seconds(self) -> int:
        """Session TTL in seconds."""
        return self.expiration_in_minutes * 60

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SessionConfig:
        """Validate ``data`` into a ``SessionConfig``.

        Raises
        ------
        ConfigurationError
            If ``data`` does not describe a valid configuration.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid session configuration: {exc}") from exc

    @classmethod
    def from_yaml(cls, path: str | Path) -> SessionConfig:
        """Load a configuration document from a YAML file.

        An empty file yields the defaults.

        Raises
        ------
        ConfigurationError
            If the file cannot be read, is not a mapping, or fails validation.
        """
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read configuration file {str(path)!r}: {exc}") from exc
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Malformed YAML in {str(path)!r}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Configuration file {str(path)!r} must contain a mapping, "
                f"got {type(data).__name__}"
            )
        return cls.from_mapping(data)


__all__ = [
    "DEFAULT_EXPIRATION_MINUTES",
    "ReconnectPolicy",
    "RedisConfig",
    "SessionConfig",
]
