"""Shared pytest fixtures for kv-sessions tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

import kv_sessions


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _reset_default_manager() -> Iterator[None]:
    kv_sessions.reset()
    yield
    kv_sessions.reset()
