#!/usr/bin/env python3
"""Example: Quickstart — kv-sessions

Minimal working example: create a session, validate it, update its
parameters and delete it, all against the in-memory backend.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install kv-sessions
"""
from __future__ import annotations

import asyncio

import kv_sessions
from kv_sessions import InMemoryBackend, InvalidSessionError, SessionData, SessionKeys


async def main() -> None:
    print(f"kv-sessions version: {kv_sessions.__version__}")

    # Step 1: Build a manager over an in-memory store
    manager = await kv_sessions.create(
        {"expiration_enabled": True, "expiration_in_minutes": 15},
        backend=InMemoryBackend(),
    )

    # Step 2: Start a session for user 42
    session_id = await manager.create_session(42, {SessionKeys.USER_NICKNAME: "ada"})
    print(f"Created session {session_id} for user 42")

    # Step 3: Validate it (this also restarts its 15 minute countdown)
    await manager.validate_session(42, session_id)
    print(f"Active sessions: {await manager.get_active_sessions_count()}")

    # Step 4: Update the parameters; the owner is checked first
    await manager.update_session(
        SessionData(user_id=42, session_id=session_id, parameters={"locale": "en"})
    )
    print(f"Stored: {await manager.get_session_data(42)}")

    # Step 5: A forged session ID is rejected
    try:
        await manager.validate_session(42, session_id + 1)
    except InvalidSessionError as exc:
        print(f"Rejected: {exc}")

    # Step 6: Log out
    await manager.delete_session(42)
    print(f"Active sessions after delete: {await manager.get_active_sessions_count()}")


if __name__ == "__main__":
    asyncio.run(main())
