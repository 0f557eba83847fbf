"""kv-sessions — User session management over a key-value store.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import kv_sessions
>>> kv_sessions.__version__
'0.1.0'
"""
from __future__ import annotations

# Configuration and errors
from kv_sessions.config import ReconnectPolicy, RedisConfig, SessionConfig
from kv_sessions.errors import (
    BackendConnectionError,
    BackendError,
    ConfigurationError,
    InvalidSessionError,
    SessionError,
)

# Session core
from kv_sessions.session.data import SessionData
from kv_sessions.session.encoding import encode_session_id
from kv_sessions.session.keys import SessionKeys, generate_key
from kv_sessions.session.manager import SessionManager
from kv_sessions.session.repository import KeyValueSessionRepository, SessionRepository

# Storage backends
from kv_sessions.storage.base import KeyValueBackend
from kv_sessions.storage.memory import InMemoryBackend
from kv_sessions.storage.redis import RedisBackend

# Process-wide handle
from kv_sessions.convenience import create, get_manager, reset

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Setup
    "create",
    "get_manager",
    "reset",
    # Configuration
    "ReconnectPolicy",
    "RedisConfig",
    "SessionConfig",
    # Errors
    "BackendConnectionError",
    "BackendError",
    "ConfigurationError",
    "InvalidSessionError",
    "SessionError",
    # Session core
    "KeyValueSessionRepository",
    "SessionData",
    "SessionKeys",
    "SessionManager",
    "SessionRepository",
    "encode_session_id",
    "generate_key",
    # Storage
    "InMemoryBackend",
    "KeyValueBackend",
    "RedisBackend",
]
