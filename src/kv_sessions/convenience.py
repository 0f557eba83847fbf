"""Convenience API for kv-sessions — build a ready-to-use manager.

Example
-------
::

    import kv_sessions

    manager = await kv_sessions.create(
        {"expiration_in_minutes": 30, "redis": {"host": "localhost", "port": 6379}}
    )
    session_id = await manager.create_session(42, {"locale": "en"})
    await manager.validate_session(42, session_id)

``create`` returns the manager it builds and also records it as the
process default, available afterwards through ``get_manager``.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import redis.asyncio as redis_asyncio

from kv_sessions.config import SessionConfig
from kv_sessions.errors import ConfigurationError
from kv_sessions.session.manager import SessionManager
from kv_sessions.session.repository import KeyValueSessionRepository
from kv_sessions.storage.base import KeyValueBackend
from kv_sessions.storage.redis import RedisBackend

logger = logging.getLogger(__name__)

_default_manager: SessionManager | None = None


def _resolve_backend(
    config: SessionConfig,
    client: redis_asyncio.Redis | None,
    backend: KeyValueBackend | None,
) -> KeyValueBackend:
    if backend is not None and client is not None:
        raise ConfigurationError("Pass either a Redis client or a backend, not both")
    if backend is not None:
        return backend
    if client is not None:
        if config.redis is not None:
            raise ConfigurationError("Pass either a Redis client or a Redis config, not both")
        return RedisBackend(client=client)
    if config.redis is None:
        raise ConfigurationError("Redis config is not defined")
    return RedisBackend(config.redis)


async def create(
    config: SessionConfig | Mapping[str, Any] | None = None,
    *,
    client: redis_asyncio.Redis | None = None,
    backend: KeyValueBackend | None = None,
) -> SessionManager:
    """Build a ``SessionManager`` and make it the process default.

    Exactly one storage source is used: ``backend`` if given, else
    ``client`` (an already-connected Redis client), else ``config.redis``,
    in which case a connection is opened and the handshake awaited.
    ``client`` cannot be combined with ``backend`` or ``config.redis``.

    Parameters
    ----------
    config:
        A ``SessionConfig`` or a mapping validated into one.  Defaults to
        ``SessionConfig()``.
    client:
        Existing ``redis.asyncio.Redis`` client (``decode_responses=True``).
    backend:
        Any ``KeyValueBackend``, e.g. ``InMemoryBackend`` for tests.

    Returns
    -------
    SessionManager
        The new manager.

    Raises
    ------
    ConfigurationError
        If the configuration is invalid or names no storage source.
    BackendConnectionError
        If connecting to Redis fails.
    """
    global _default_manager

    if config is None:
        config = SessionConfig()
    elif not isinstance(config, SessionConfig):
        config = SessionConfig.from_mapping(config)

    kv_backend = _resolve_backend(config, client, backend)
    await kv_backend.init()

    repository = KeyValueSessionRepository(
        kv_backend,
        expiration_enabled=config.expiration_enabled,
        expiration_in_minutes=config.expiration_in_minutes,
    )
    manager = SessionManager(repository)
    _default_manager = manager
    logger.debug("Session manager ready (%r)", repository)
    return manager


def get_manager() -> SessionManager | None:
    """Return the manager built by the latest ``create`` call, or None."""
    return _default_manager


def reset() -> None:
    """Forget the process default manager."""
    global _default_manager
    _default_manager = None


__all__ = ["create", "get_manager", "reset"]
