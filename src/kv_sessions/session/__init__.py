"""Session management subpackage.

Provides the session record, its storage key scheme, and the repository
and manager layers that implement the session lifecycle.

Public surface
--------------
- SessionData                — one user's session record
- SessionKeys                — well-known parameter names
- generate_key               — storage key for a user's session
- encode_session_id          — bit-reversal of a session ID
- SessionRepository          — abstract persistence contract
- KeyValueSessionRepository  — repository over a KeyValueBackend
- SessionManager             — create / validate / update / delete sessions
"""
from __future__ import annotations

from kv_sessions.session.data import SessionData
from kv_sessions.session.encoding import encode_session_id
from kv_sessions.session.keys import SessionKeys, generate_key
from kv_sessions.session.manager import SessionManager
from kv_sessions.session.repository import KeyValueSessionRepository, SessionRepository

__all__ = [
    "KeyValueSessionRepository",
    "SessionData",
    "SessionKeys",
    "SessionManager",
    "SessionRepository",
    "encode_session_id",
    "generate_key",
]
