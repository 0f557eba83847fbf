"""Session lifecycle management.

Provides ``SessionManager``, the facade applications use to create,
validate, read, update and delete user sessions.  Persistence is
delegated to a ``SessionRepository``.

Per user, a session moves through::

    NONE --create--> ACTIVE --validate/update--> ACTIVE --delete/expiry--> gone

Classes
-------
- SessionManager  — session workflows over a SessionRepository
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from kv_sessions.errors import InvalidSessionError
from kv_sessions.session.data import SessionData
from kv_sessions.session.repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionManager:
    """Create, validate, update and delete user sessions.

    A successful ``validate_session`` restarts the session's expiry
    countdown in the background (sliding expiration).  The refresh is not
    awaited by the validating caller; failures are logged.  Use
    ``wait_for_refreshes`` to observe outstanding refreshes.

    Parameters
    ----------
    repository:
        Persistence layer for session records.
    """

    def __init__(self, repository: SessionRepository) -> None:
        self._repository = repository
        self._pending_refreshes: set[asyncio.Task[bool]] = set()

    @property
    def repository(self) -> SessionRepository:
        """The repository backing this manager."""
        return self._repository

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    async def create_session(self, user_id: int, parameters: Any = None) -> int:
        """Start a new session for ``user_id`` and return its ID.

        Any existing session of the user is replaced.

        Parameters
        ----------
        user_id:
            Owner of the session.
        parameters:
            Opaque, JSON-compatible session payload.

        Returns
        -------
        int
            The newly issued session ID.
        """
        session_id = await self._repository.generate_session_id()
        await self._repository.save_session_data(
            SessionData(user_id=user_id, session_id=session_id, parameters=parameters)
        )
        logger.debug("Created session %d for user %d", session_id, user_id)
        return session_id

    async def validate_session(self, user_id: int, session_id: int) -> SessionData:
        """Check that ``session_id`` is ``user_id``'s current session.

        On success the session's TTL is refreshed in the background.

        Returns
        -------
        SessionData
            The stored session.

        Raises
        ------
        InvalidSessionError
            If no session is stored for ``user_id`` or the IDs differ.
        """
        session_data = await self._repository.get_session_data(user_id)
        if session_data is None or not (
            session_data.user_id == user_id and session_data.session_id == session_id
        ):
            raise InvalidSessionError(user_id, session_id)
        self._schedule_refresh(user_id)
        return session_data

    async def get_session_data(self, user_id: int) -> SessionData | None:
        """Return ``user_id``'s stored session, or None."""
        return await self._repository.get_session_data(user_id)

    async def update_session(self, session_data: SessionData) -> None:
        """Overwrite a session after confirming the caller owns it.

        Validation completes before anything is written.

        Raises
        ------
        InvalidSessionError
            If ``session_data`` does not name the user's current session.
            Nothing is written in that case.
        """
        await self.validate_session(session_data.user_id, session_data.session_id)
        await self._repository.save_session_data(session_data)
        logger.debug(
            "Updated session %d for user %d", session_data.session_id, session_data.user_id
        )

    async def delete_session(self, user_id: int) -> None:
        """Remove ``user_id``'s session.  Deleting a missing session is fine."""
        await self._repository.delete_session(user_id)
        logger.debug("Deleted session for user %d", user_id)

    async def get_active_sessions_count(self) -> int:
        """Return the number of sessions currently stored."""
        return await self._repository.get_active_sessions_count()

    # ------------------------------------------------------------------
    # Background refreshes
    # ------------------------------------------------------------------

    def _schedule_refresh(self, user_id: int) -> None:
        task = asyncio.get_running_loop().create_task(
            self._repository.extend_session(user_id)
        )
        self._pending_refreshes.add(task)
        task.add_done_callback(lambda t: self._on_refresh_done(user_id, t))

    def _on_refresh_done(self, user_id: int, task: asyncio.Task[bool]) -> None:
        self._pending_refreshes.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Failed to extend session for user %d: %s", user_id, exc)

    async def wait_for_refreshes(self) -> list[bool | BaseException]:
        """Wait for all scheduled TTL refreshes to finish.

        Returns
        -------
        list
            One entry per refresh: the backend's result, or the exception
            the refresh raised.
        """
        if not self._pending_refreshes:
            return []
        return await asyncio.gather(*list(self._pending_refreshes), return_exceptions=True)

    def __repr__(self) -> str:
        return f"SessionManager(repository={self._repository!r})"


__all__ = ["SessionManager"]
