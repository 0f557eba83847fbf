"""In-process key-value backend.

Stores values in a plain Python dict guarded by ``asyncio.Lock`` and
honours TTLs against a monotonic clock.  All data is lost when the
process exits.  Primarily useful for tests and local prototyping.

Classes
-------
- InMemoryBackend  — dict-backed ephemeral async storage
"""
from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from fnmatch import fnmatchcase

from kv_sessions.errors import BackendError
from kv_sessions.storage.base import KeyValueBackend


class InMemoryBackend(KeyValueBackend):
    """Ephemeral key-value store with Redis-like TTL semantics.

    Expired keys are dropped lazily, the next time they are touched or
    listed.

    Parameters
    ----------
    clock:
        Zero-argument callable returning monotonic seconds.  Defaults to
        ``time.monotonic``; tests substitute a controllable clock.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._values: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}
        self._lock: asyncio.Lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _evict_if_expired(self, key: str) -> None:
        deadline = self._expires_at.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._values.pop(key, None)
            del self._expires_at[key]

    # ------------------------------------------------------------------
    # KeyValueBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        async with self._lock:
            self._evict_if_expired(key)
            return self._values.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise BackendError(f"Invalid expire time {ttl_seconds!r} for key {key!r}")
        async with self._lock:
            self._values[key] = value
            if ttl_seconds is None:
                self._expires_at.pop(key, None)
            else:
                self._expires_at[key] = self._clock() + ttl_seconds

    async def delete(self, key: str) -> int:
        async with self._lock:
            self._evict_if_expired(key)
            self._expires_at.pop(key, None)
            return 0 if self._values.pop(key, None) is None else 1

    async def incrby(self, key: str, amount: int) -> int:
        async with self._lock:
            self._evict_if_expired(key)
            current = self._values.get(key, "0")
            try:
                value = int(current) + amount
            except ValueError as exc:
                raise BackendError(
                    f"Value at {key!r} is not an integer or out of range"
                ) from exc
            self._values[key] = str(value)
            return value

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        async with self._lock:
            self._evict_if_expired(key)
            if key not in self._values:
                return False
            if ttl_seconds <= 0:
                del self._values[key]
                self._expires_at.pop(key, None)
            else:
                self._expires_at[key] = self._clock() + ttl_seconds
            return True

    async def keys(self, pattern: str) -> list[str]:
        async with self._lock:
            for key in list(self._expires_at):
                self._evict_if_expired(key)
            return [key for key in self._values if fnmatchcase(key, pattern)]

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    async def ttl(self, key: str) -> float | None:
        """Return the remaining lifetime of ``key`` in seconds.

        None when the key is missing or has no expiry.
        """
        async with self._lock:
            self._evict_if_expired(key)
            deadline = self._expires_at.get(key)
            if deadline is None:
                return None
            return deadline - self._clock()

    async def clear(self) -> None:
        """Remove all stored keys."""
        async with self._lock:
            self._values.clear()
            self._expires_at.clear()

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"InMemoryBackend(keys={len(self._values)})"


__all__ = ["InMemoryBackend"]
