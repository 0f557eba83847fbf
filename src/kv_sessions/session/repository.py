"""Session persistence over a key-value backend.

Classes
-------
- SessionRepository          — abstract persistence contract
- KeyValueSessionRepository  — implementation over a ``KeyValueBackend``

Failure policy
--------------
Writes and the active-session scan propagate backend errors.  Reads fail
soft: a missing key, a backend error or an undecodable payload all yield
``None``.  Deletes are best-effort: backend errors are logged and dropped.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import ValidationError

from kv_sessions.config import DEFAULT_EXPIRATION_MINUTES
from kv_sessions.errors import SessionError
from kv_sessions.session.data import SessionData
from kv_sessions.session.keys import SESSION_ID_KEY, SESSION_KEY_PATTERN, generate_key
from kv_sessions.storage.base import KeyValueBackend

logger = logging.getLogger(__name__)

# Value INCRBY returns the first time the counter is touched.
_COUNTER_START: int = 1
_INCR_DELTA: int = 1


class SessionRepository(ABC):
    """Persistence contract used by ``SessionManager``."""

    @abstractmethod
    async def save_session_data(self, session_data: SessionData) -> None:
        """Save ``session_data`` applying the repository's TTL policy."""

    @abstractmethod
    async def save_session_data_with_ttl(
        self, session_data: SessionData, ttl_seconds: int | None = None
    ) -> None:
        """Save ``session_data``, expiring after ``ttl_seconds`` if given."""

    @abstractmethod
    async def get_session_data(self, user_id: int) -> SessionData | None:
        """Return the stored session for ``user_id``, or None."""

    @abstractmethod
    async def delete_session(self, user_id: int) -> None:
        """Remove the stored session for ``user_id`` if there is one."""

    @abstractmethod
    async def get_active_sessions_count(self) -> int:
        """Return the number of stored sessions."""

    @abstractmethod
    async def generate_session_id(self) -> int:
        """Return a session ID that has never been issued before."""

    @abstractmethod
    async def extend_session(self, user_id: int) -> bool:
        """Restart the expiry countdown of ``user_id``'s session.

        Returns True if a TTL was applied.
        """


class KeyValueSessionRepository(SessionRepository):
    """Stores one JSON-encoded ``SessionData`` per user.

    Parameters
    ----------
    backend:
        The key-value store.  Shared by every operation.
    expiration_enabled:
        When True (default) every save applies a TTL of
        ``expiration_in_minutes * 60`` seconds.  When False sessions
        persist until deleted.
    expiration_in_minutes:
        Session lifetime in minutes.  Default: 15.
    clock:
        Wall clock in seconds, used to scatter the very first session ID.
        Defaults to ``time.time``.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        expiration_enabled: bool = True,
        expiration_in_minutes: int = DEFAULT_EXPIRATION_MINUTES,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._backend = backend
        self._expiration_enabled = expiration_enabled
        self._expiration_in_minutes = expiration_in_minutes
        self._clock = clock or time.time

    @property
    def backend(self) -> KeyValueBackend:
        """The backend this repository writes to."""
        return self._backend

    @property
    def ttl_seconds(self) -> int | None:
        """TTL applied on save, or None when expiration is disabled."""
        if not self._expiration_enabled:
            return None
        return self._expiration_in_minutes * 60

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def save_session_data(self, session_data: SessionData) -> None:
        """Save ``session_data`` with the configured TTL policy.

        Raises
        ------
        SessionError
            If ``session_data`` is None.
        """
        if session_data is None:
            raise SessionError("Session data must be provided")
        await self.save_session_data_with_ttl(session_data, self.ttl_seconds)

    async def save_session_data_with_ttl(
        self, session_data: SessionData, ttl_seconds: int | None = None
    ) -> None:
        """Serialize ``session_data`` and store it under the user's key.

        A falsy ``ttl_seconds`` stores the session without expiry.  Any
        previous session of the same user is overwritten.

        Raises
        ------
        SessionError
            If ``session_data`` is None.
        """
        if session_data is None:
            raise SessionError("Session data must be provided")
        key = generate_key(session_data.user_id)
        await self._backend.set(key, session_data.serialize(), ttl_seconds or None)

    async def delete_session(self, user_id: int) -> None:
        """Delete ``user_id``'s session.  Never raises."""
        key = generate_key(user_id)
        try:
            await self._backend.delete(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Ignoring failure to delete session key %r: %s", key, exc)

    async def extend_session(self, user_id: int) -> bool:
        """Reset the TTL of ``user_id``'s session without touching its value.

        Returns False without contacting the backend when expiration is
        disabled, otherwise whatever the backend reports.
        """
        ttl = self.ttl_seconds
        if ttl is None:
            return False
        return await self._backend.expire(generate_key(user_id), ttl)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_session_data(self, user_id: int) -> SessionData | None:
        """Return ``user_id``'s session, or None.

        Backend errors and corrupt payloads are logged and reported as a
        missing session.
        """
        key = generate_key(user_id)
        try:
            raw = await self._backend.get(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to read session key %r: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return SessionData.deserialize(raw)
        except ValidationError as exc:
            logger.warning("Discarding undecodable session under %r: %s", key, exc)
            return None

    async def get_active_sessions_count(self) -> int:
        """Count stored sessions by scanning the session key pattern."""
        keys = await self._backend.keys(SESSION_KEY_PATTERN)
        return len(keys) if keys else 0

    # ------------------------------------------------------------------
    # ID generation
    # ------------------------------------------------------------------

    async def generate_session_id(self) -> int:
        """Atomically increment the session counter and return the result.

        The first value a fresh counter produces would be ``1``.  In that
        case the counter is bumped once more by the current millisecond
        component of the wall clock so the first issued ID is not the
        obvious one.  Every later ID is a plain increment.
        """
        session_id = await self._backend.incrby(SESSION_ID_KEY, _INCR_DELTA)
        if not session_id or session_id == _COUNTER_START:
            millis = int(self._clock() * 1000) % 1000
            session_id = await self._backend.incrby(SESSION_ID_KEY, millis)
        return session_id

    def __repr__(self) -> str:
        return (
            f"KeyValueSessionRepository(backend={self._backend!r}, "
            f"ttl_seconds={self.ttl_seconds!r})"
        )


__all__ = ["KeyValueSessionRepository", "SessionRepository"]
