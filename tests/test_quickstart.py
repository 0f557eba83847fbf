"""Test that the quickstart API works for kv-sessions."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

import kv_sessions
from kv_sessions import ConfigurationError, InMemoryBackend, InvalidSessionError, SessionManager
from kv_sessions.storage.redis import RedisBackend


@pytest.mark.asyncio
async def test_quickstart_scenario() -> None:
    manager = await kv_sessions.create(
        {"expiration_in_minutes": 15}, backend=InMemoryBackend()
    )

    session_id = await manager.create_session(42, {"locale": "en"})
    data = await manager.validate_session(42, session_id)
    assert data.parameters == {"locale": "en"}
    await manager.wait_for_refreshes()

    with pytest.raises(InvalidSessionError):
        await manager.validate_session(42, session_id + 1)

    assert await manager.get_active_sessions_count() == 1
    await manager.delete_session(42)
    assert await manager.get_active_sessions_count() == 0


@pytest.mark.asyncio
async def test_get_manager_returns_latest() -> None:
    assert kv_sessions.get_manager() is None
    manager = await kv_sessions.create(backend=InMemoryBackend())
    assert isinstance(manager, SessionManager)
    assert kv_sessions.get_manager() is manager

    kv_sessions.reset()
    assert kv_sessions.get_manager() is None


@pytest.mark.asyncio
async def test_config_applies_to_repository() -> None:
    manager = await kv_sessions.create(
        kv_sessions.SessionConfig(expiration_enabled=False), backend=InMemoryBackend()
    )
    assert manager.repository.ttl_seconds is None  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_requires_storage_source() -> None:
    with pytest.raises(ConfigurationError, match="Redis config is not defined"):
        await kv_sessions.create({"expiration_in_minutes": 15})
    assert kv_sessions.get_manager() is None


@pytest.mark.asyncio
async def test_rejects_client_and_backend() -> None:
    with pytest.raises(ConfigurationError):
        await kv_sessions.create(client=AsyncMock(), backend=InMemoryBackend())


@pytest.mark.asyncio
async def test_rejects_client_and_redis_config() -> None:
    client = AsyncMock()
    with pytest.raises(ConfigurationError, match="not both"):
        await kv_sessions.create({"redis": {"host": "redis.test"}}, client=client)
    client.ping.assert_not_awaited()
    assert kv_sessions.get_manager() is None


@pytest.mark.asyncio
async def test_rejects_invalid_mapping() -> None:
    with pytest.raises(ConfigurationError):
        await kv_sessions.create({"expiration_in_minutes": -5}, backend=InMemoryBackend())


@pytest.mark.asyncio
async def test_shared_client_is_wrapped() -> None:
    client = AsyncMock()
    manager = await kv_sessions.create(client=client)
    backend = manager.repository.backend  # type: ignore[attr-defined]
    assert isinstance(backend, RedisBackend)
    assert backend.client is client


@pytest.mark.asyncio
async def test_redis_config_opens_connection() -> None:
    with patch.object(RedisBackend, "init", AsyncMock()) as init:
        manager = await kv_sessions.create({"redis": {"host": "redis.test"}})
    init.assert_awaited_once()
    assert isinstance(manager.repository.backend, RedisBackend)  # type: ignore[attr-defined]
