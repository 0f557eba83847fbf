#!/usr/bin/env python3
"""Example: Storage Backends

Connects to a Redis server, either from host/port settings (the library
owns the connection) or through a client the application already has.

Usage:
    python examples/02_storage_backends.py [HOST] [PORT]

Requirements:
    pip install kv-sessions
    A reachable Redis server (default: localhost:6379)
"""
from __future__ import annotations

import asyncio
import sys

import redis.asyncio as redis_asyncio

import kv_sessions
from kv_sessions import BackendConnectionError, RedisBackend


async def demo_owned_connection(host: str, port: int) -> None:
    manager = await kv_sessions.create(
        {
            "expiration_in_minutes": 5,
            "redis": {"host": host, "port": port, "socket_timeout": 2.0},
        }
    )
    session_id = await manager.create_session(1001, {"source": "owned"})
    print(f"  [owned] session {session_id}, active={await manager.get_active_sessions_count()}")
    await manager.delete_session(1001)


async def demo_shared_client(host: str, port: int) -> None:
    client = redis_asyncio.Redis(host=host, port=port, decode_responses=True)
    try:
        manager = await kv_sessions.create({"expiration_enabled": False}, client=client)
        session_id = await manager.create_session(1002, {"source": "shared"})
        stored = await manager.validate_session(1002, session_id)
        print(f"  [shared] {stored}")
        await manager.delete_session(1002)
    finally:
        await client.aclose()


async def main(host: str, port: int) -> None:
    print(f"kv-sessions version: {kv_sessions.__version__}")
    print("\nLibrary-owned connection:")
    try:
        await demo_owned_connection(host, port)
    except BackendConnectionError as exc:
        print(f"  Redis unavailable: {exc}")
        return
    finally:
        manager = kv_sessions.get_manager()
        if manager is not None and isinstance(manager.repository.backend, RedisBackend):
            await manager.repository.backend.close()

    print("\nApplication-owned client:")
    await demo_shared_client(host, port)


if __name__ == "__main__":
    host = sys.argv[1] if len(sys.argv) > 1 else "localhost"
    port = int(sys.argv[2]) if len(sys.argv) > 2 else 6379
    asyncio.run(main(host, port))
