"""Storage key naming for session records.

Session records live under ``_<user_id>``.  The ID counter lives under
``SESSION_ID``; because it does not start with an underscore it can never
match ``SESSION_KEY_PATTERN``, which is what the active-session count scans.

Names
-----
- generate_key         — key for a user's session record
- SESSION_KEY_PREFIX   — prefix shared by every session key
- SESSION_KEY_PATTERN  — glob pattern matching every session key
- SESSION_ID_KEY       — key of the session ID counter
- SessionKeys          — well-known names used inside ``parameters``
"""
from __future__ import annotations

SESSION_KEY_PREFIX: str = "_"
SESSION_KEY_PATTERN: str = "_[0-9]*"
SESSION_ID_KEY: str = "SESSION_ID"


def generate_key(user_id: int) -> str:
    """Return the storage key for ``user_id``'s session.

    One session per user: saving a new session for the same user
    overwrites the previous one.
    """
    return f"{SESSION_KEY_PREFIX}{user_id}"


class SessionKeys:
    """Parameter names shared between session producers and consumers."""

    USER_FIRST_NAME = "userFirstName"
    USER_LAST_NAME = "userLastName"
    USER_NICKNAME = "userNickname"


__all__ = [
    "SESSION_ID_KEY",
    "SESSION_KEY_PATTERN",
    "SESSION_KEY_PREFIX",
    "SessionKeys",
    "generate_key",
]
