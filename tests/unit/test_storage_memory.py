"""Unit tests for kv_sessions.storage.memory.InMemoryBackend.

A manually advanced clock stands in for time so TTL behaviour can be
checked without sleeping.
"""
from __future__ import annotations

import asyncio
from typing import Any

import pytest

from kv_sessions.errors import BackendError
from kv_sessions.storage.memory import InMemoryBackend


@pytest.fixture()
def backend(clock: Any) -> InMemoryBackend:
    return InMemoryBackend(clock=clock)


# ---------------------------------------------------------------------------
# get / set / delete
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_set_and_get(backend: InMemoryBackend) -> None:
    await backend.set("k", "v")
    assert await backend.get("k") == "v"


@pytest.mark.asyncio
async def test_get_missing_returns_none(backend: InMemoryBackend) -> None:
    assert await backend.get("ghost") is None


@pytest.mark.asyncio
async def test_set_overwrites(backend: InMemoryBackend) -> None:
    await backend.set("k", "old")
    await backend.set("k", "new")
    assert await backend.get("k") == "new"


@pytest.mark.asyncio
async def test_delete_reports_removed_count(backend: InMemoryBackend) -> None:
    await backend.set("k", "v")
    assert await backend.delete("k") == 1
    assert await backend.delete("k") == 0
    assert await backend.get("k") is None


@pytest.mark.asyncio
async def test_clear(backend: InMemoryBackend) -> None:
    await backend.set("a", "1")
    await backend.set("b", "2", ttl_seconds=10)
    await backend.clear()
    assert len(backend) == 0


# ---------------------------------------------------------------------------
# TTL
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_key_expires_after_ttl(backend: InMemoryBackend, clock: Any) -> None:
    await backend.set("k", "v", ttl_seconds=60)
    clock.advance(59)
    assert await backend.get("k") == "v"
    clock.advance(1)
    assert await backend.get("k") is None


@pytest.mark.asyncio
async def test_set_without_ttl_never_expires(backend: InMemoryBackend, clock: Any) -> None:
    await backend.set("k", "v")
    clock.advance(10**9)
    assert await backend.get("k") == "v"
    assert await backend.ttl("k") is None


@pytest.mark.asyncio
async def test_plain_set_clears_previous_ttl(backend: InMemoryBackend, clock: Any) -> None:
    await backend.set("k", "v", ttl_seconds=5)
    await backend.set("k", "v2")
    clock.advance(10)
    assert await backend.get("k") == "v2"


@pytest.mark.asyncio
async def test_non_positive_ttl_rejected(backend: InMemoryBackend) -> None:
    with pytest.raises(BackendError):
        await backend.set("k", "v", ttl_seconds=0)


@pytest.mark.asyncio
async def test_expire_resets_countdown(backend: InMemoryBackend, clock: Any) -> None:
    await backend.set("k", "v", ttl_seconds=60)
    clock.advance(50)
    assert await backend.expire("k", 60) is True
    clock.advance(50)
    assert await backend.get("k") == "v"
    assert await backend.ttl("k") == pytest.approx(10)


@pytest.mark.asyncio
async def test_expire_missing_key(backend: InMemoryBackend) -> None:
    assert await backend.expire("ghost", 60) is False


@pytest.mark.asyncio
async def test_expire_on_expired_key(backend: InMemoryBackend, clock: Any) -> None:
    await backend.set("k", "v", ttl_seconds=1)
    clock.advance(2)
    assert await backend.expire("k", 60) is False


@pytest.mark.asyncio
async def test_expire_non_positive_deletes(backend: InMemoryBackend) -> None:
    await backend.set("k", "v")
    assert await backend.expire("k", 0) is True
    assert await backend.get("k") is None


# ---------------------------------------------------------------------------
# incrby
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_incrby_starts_from_zero(backend: InMemoryBackend) -> None:
    assert await backend.incrby("counter", 1) == 1
    assert await backend.incrby("counter", 10) == 11
    assert await backend.get("counter") == "11"


@pytest.mark.asyncio
async def test_incrby_non_integer_value(backend: InMemoryBackend) -> None:
    await backend.set("k", "abc")
    with pytest.raises(BackendError):
        await backend.incrby("k", 1)


@pytest.mark.asyncio
async def test_incrby_concurrent_values_are_unique(backend: InMemoryBackend) -> None:
    results = await asyncio.gather(*(backend.incrby("counter", 1) for _ in range(200)))
    assert sorted(results) == list(range(1, 201))


# ---------------------------------------------------------------------------
# keys
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_keys_matches_pattern(backend: InMemoryBackend) -> None:
    for key in ("_1", "_42", "SESSION_ID", "other"):
        await backend.set(key, "x")
    assert sorted(await backend.keys("_[0-9]*")) == ["_1", "_42"]


@pytest.mark.asyncio
async def test_keys_skips_expired(backend: InMemoryBackend, clock: Any) -> None:
    await backend.set("_1", "x", ttl_seconds=5)
    await backend.set("_2", "x")
    clock.advance(6)
    assert await backend.keys("_*") == ["_2"]
    assert len(backend) == 1


@pytest.mark.asyncio
async def test_keys_star_and_question_mark(backend: InMemoryBackend) -> None:
    await backend.set("ab", "x")
    await backend.set("abc", "x")
    assert await backend.keys("a?") == ["ab"]
    assert sorted(await backend.keys("*")) == ["ab", "abc"]
