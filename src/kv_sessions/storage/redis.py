"""Redis key-value backend built on ``redis.asyncio``.

The backend either owns its connection (built from host/port) or wraps a
client the caller already connected.  Owned connections are created with
a ``ReconnectRetry`` that governs the first handshake and every reconnect
after a dropped connection:

- a refused connection is fatal and is not retried;
- any other connection or timeout failure is retried after a linear
  backoff (``attempt * 100 ms``, capped at 3 s) for at most 20 retries
  and one hour of total retry time;
- once the budget is spent the last Redis error is raised.

Classes
-------
- LinearBackoff   — ``redis.backoff`` strategy growing linearly to a cap
- ReconnectRetry  — ``redis.asyncio.retry.Retry`` enforcing the reconnect policy
- RedisBackend    — ``KeyValueBackend`` over a ``redis.asyncio.Redis`` client
"""
from __future__ import annotations

import asyncio
import errno
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis_asyncio
from redis.asyncio.retry import Retry
from redis.backoff import AbstractBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from kv_sessions.config import ReconnectPolicy, RedisConfig
from kv_sessions.errors import BackendConnectionError
from kv_sessions.storage.base import KeyValueBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCAN_BATCH_SIZE: int = 100


class LinearBackoff(AbstractBackoff):
    """Backoff that grows by a fixed step per failure up to a cap."""

    def __init__(self, policy: ReconnectPolicy) -> None:
        self._policy = policy

    def reset(self) -> None:
        pass

    def compute(self, failures: int) -> float:
        return self._policy.compute_delay(failures)


def _is_connection_refused(exc: BaseException) -> bool:
    """Return True if ``exc`` (or anything it was raised from) is ECONNREFUSED."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if getattr(current, "errno", None) == errno.ECONNREFUSED:
            return True
        current = current.__cause__ or current.__context__
    return "connection refused" in str(exc).lower()


class ReconnectRetry(Retry):
    """Retry strategy applying a ``ReconnectPolicy`` to connection failures.

    Retries connection and timeout errors up to ``policy.max_attempts``
    times with a ``LinearBackoff``.  A refused connection stops retrying
    immediately, and so does a call whose retries have taken longer than
    ``policy.max_total_retry_seconds``.  In both cases redis-py's failure
    handler still runs first so the broken connection is released.

    Parameters
    ----------
    policy:
        Backoff and retry budget.
    clock:
        Monotonic clock used to measure the retry budget.  Defaults to
        ``time.monotonic``.
    """

    def __init__(
        self,
        policy: ReconnectPolicy,
        clock: Callable[[], float] | None = None,
    ) -> None:
        super().__init__(
            LinearBackoff(policy),
            policy.max_attempts,
            supported_errors=(RedisConnectionError, RedisTimeoutError),
        )
        self._policy = policy
        self._clock = clock or time.monotonic

    async def call_with_retry(
        self,
        do: Callable[[], Awaitable[T]],
        fail: Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        started = self._clock()
        failures = 0

        async def _fail(error: Exception, *extra: Any) -> None:
            nonlocal failures
            failures += 1
            await fail(error, *extra)
            if _is_connection_refused(error):
                raise error
            if self._clock() - started > self._policy.max_total_retry_seconds:
                logger.warning(
                    "Giving up on Redis after %d failures: retry time exhausted", failures
                )
                raise error
            if failures <= self._policy.max_attempts:
                logger.warning(
                    "Redis connection failure %d (%s); retrying in %.2fs",
                    failures,
                    error,
                    self._policy.compute_delay(failures),
                )

        return await super().call_with_retry(do, _fail, *args, **kwargs)


class RedisBackend(KeyValueBackend):
    """Stores keys in a Redis server.

    Parameters
    ----------
    config:
        Connection settings.  Mutually exclusive with ``client``.
    client:
        An already-connected ``redis.asyncio.Redis`` client.  It must be
        created with ``decode_responses=True``.  The backend does not
        close a client it did not create, and leaves its retry settings
        alone.
    clock:
        Monotonic clock used to measure the retry budget.
    """

    def __init__(
        self,
        config: RedisConfig | None = None,
        *,
        client: redis_asyncio.Redis | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if (config is None) == (client is None):
            raise ValueError("RedisBackend needs exactly one of 'config' or 'client'")
        self._config = config
        self._init_lock = asyncio.Lock()
        if config is not None:
            self._client = redis_asyncio.Redis(
                host=config.host,
                port=config.port,
                db=config.db,
                password=config.password,
                socket_timeout=config.socket_timeout,
                socket_connect_timeout=config.socket_timeout,
                decode_responses=True,
                retry=ReconnectRetry(config.reconnect, clock=clock),
                retry_on_error=[RedisConnectionError, RedisTimeoutError],
            )
            self._owns_client = True
            self._ready = False
        else:
            self._client = client
            self._owns_client = False
            self._ready = True

    @property
    def client(self) -> redis_asyncio.Redis:
        """The underlying Redis client for advanced operations."""
        return self._client

    @property
    def is_ready(self) -> bool:
        """True once the handshake has completed."""
        return self._ready

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    async def init(self) -> None:
        """Connect to Redis, retrying transient failures.

        Idempotent: after the first successful call this returns
        immediately.  A wrapped client is taken as already connected.

        Raises
        ------
        BackendConnectionError
            If the server refuses the connection or the retry budget is
            exhausted.
        """
        if self._ready or self._config is None:
            return
        async with self._init_lock:
            if self._ready:
                return
            await self._handshake(self._config)
            self._ready = True

    async def _handshake(self, config: RedisConfig) -> None:
        try:
            await self._client.ping()
        except (RedisConnectionError, RedisTimeoutError, OSError) as exc:
            if _is_connection_refused(exc):
                raise BackendConnectionError(
                    f"The server refused the connection ({config.host}:{config.port})"
                ) from exc
            raise BackendConnectionError(
                f"Could not connect to {config.host}:{config.port}: {exc}"
            ) from exc
        logger.debug("Connected to Redis at %s:%d", config.host, config.port)

    async def close(self) -> None:
        """Close the connection if this backend created it."""
        if self._owns_client:
            await self._client.aclose()
            self._ready = False

    # ------------------------------------------------------------------
    # KeyValueBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        if ttl_seconds is not None:
            await self._client.set(key, value, ex=ttl_seconds)
        else:
            await self._client.set(key, value)

    async def delete(self, key: str) -> int:
        return int(await self._client.delete(key))

    async def incrby(self, key: str, amount: int) -> int:
        return int(await self._client.incrby(key, amount))

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        return bool(await self._client.expire(key, ttl_seconds))

    async def keys(self, pattern: str) -> list[str]:
        """Return keys matching ``pattern`` using SCAN rather than KEYS.

        SCAN may report a key more than once; duplicates are removed.
        """
        found: dict[str, None] = {}
        async for key in self._client.scan_iter(match=pattern, count=_SCAN_BATCH_SIZE):
            found[str(key)] = None
        return list(found)

    def __repr__(self) -> str:
        if self._config is None:
            return "RedisBackend(client=<external>)"
        return f"RedisBackend(host={self._config.host!r}, port={self._config.port!r})"


__all__ = ["LinearBackoff", "ReconnectRetry", "RedisBackend"]
