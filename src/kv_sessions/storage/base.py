"""Abstract base class for key-value backends.

The session repository talks to its store exclusively through the
coroutines defined here.  They mirror the handful of Redis commands the
library needs; each call stands alone (there are no transactions).

Classes
-------
- KeyValueBackend  — abstract base for all backends
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class KeyValueBackend(ABC):
    """Protocol for an async string key-value store with TTL support.

    Single-key operations are expected to be atomic on the backend side;
    ``incrby`` in particular must never hand out the same value twice.
    """

    async def init(self) -> None:
        """Prepare the backend for use.

        Called once before the first command.  Must be idempotent.  The
        default implementation does nothing.
        """

    async def close(self) -> None:
        """Release any connection held by the backend.

        The default implementation does nothing.
        """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if it is absent."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store ``value`` under ``key``, overwriting any previous value.

        Parameters
        ----------
        key:
            Storage key.
        value:
            String payload.
        ttl_seconds:
            When given, the key expires after this many seconds.  The
            expiry is applied in the same command as the write.  When
            ``None`` the key never expires.
        """

    @abstractmethod
    async def delete(self, key: str) -> int:
        """Remove ``key``.

        Returns
        -------
        int
            Number of keys removed (0 or 1).
        """

    @abstractmethod
    async def incrby(self, key: str, amount: int) -> int:
        """Atomically add ``amount`` to the integer stored at ``key``.

        A missing key counts as 0.

        Returns
        -------
        int
            The value after the increment.
        """

    @abstractmethod
    async def expire(self, key: str, ttl_seconds: int) -> bool:
        """Reset the time-to-live of an existing key.

        Returns
        -------
        bool
            True if the key existed and the TTL was applied.
        """

    @abstractmethod
    async def keys(self, pattern: str) -> list[str]:
        """Return every key matching the glob-style ``pattern``.

        Pattern syntax follows Redis: ``*``, ``?`` and ``[...]`` classes.
        """


__all__ = ["KeyValueBackend"]
