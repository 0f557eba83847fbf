"""Exception hierarchy for kv-sessions.

Every error raised deliberately by the library derives from
``SessionError`` and carries a numeric ``code`` (``-1`` unless stated
otherwise).  Errors raised by the Redis client itself are not wrapped.

Classes
-------
- SessionError            — base library error
- InvalidSessionError     — a user/session pair failed validation
- ConfigurationError      — missing or invalid configuration
- BackendConnectionError  — the backend handshake could not be completed
- BackendError            — a command failed inside an in-process backend
"""
from __future__ import annotations

DEFAULT_ERROR_CODE: int = -1


class SessionError(Exception):
    """Generic session library error.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    code:
        Numeric error code.  Defaults to ``-1``.
    """

    def __init__(self, message: str, code: int = DEFAULT_ERROR_CODE) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class InvalidSessionError(SessionError):
    """Raised when a user/session pair does not match a stored session.

    The code is always ``-1``.
    """

    def __init__(self, user_id: int, session_id: int) -> None:
        self.user_id = user_id
        self.session_id = session_id
        super().__init__(
            f"Invalid session: userId={user_id}, sessionId={session_id}"
        )


class ConfigurationError(SessionError):
    """Raised at setup time when the configuration cannot be used."""


class BackendConnectionError(SessionError):
    """Raised when the backend refuses the connection or retries run out."""


class BackendError(SessionError):
    """Raised by in-process backends when a command cannot be applied."""


__all__ = [
    "BackendConnectionError",
    "BackendError",
    "ConfigurationError",
    "DEFAULT_ERROR_CODE",
    "InvalidSessionError",
    "SessionError",
]
