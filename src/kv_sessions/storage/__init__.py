"""Key-value backend subpackage.

All backends implement the ``KeyValueBackend`` ABC.

Public surface
--------------
- KeyValueBackend  — abstract base class
- InMemoryBackend  — in-process dict with TTL support (useful for testing)
- RedisBackend     — ``redis.asyncio`` backend with a bounded reconnect policy
- LinearBackoff    — backoff strategy used by ``ReconnectRetry``
- ReconnectRetry   — retry strategy for connection failures of ``RedisBackend``
"""
from __future__ import annotations

from kv_sessions.storage.base import KeyValueBackend
from kv_sessions.storage.memory import InMemoryBackend
from kv_sessions.storage.redis import LinearBackoff, ReconnectRetry, RedisBackend

__all__ = [
    "InMemoryBackend",
    "KeyValueBackend",
    "LinearBackoff",
    "ReconnectRetry",
    "RedisBackend",
]
