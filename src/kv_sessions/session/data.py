"""Session record domain model.

``SessionData`` is a Pydantic model so that stored payloads are validated
on the way back in.  The wire format uses camelCase names and keeps the
declared field order::

    {"userId": 42, "sessionId": 1007, "parameters": {"locale": "en"}}

Classes
-------
- SessionData  — one user's session record
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SessionData(BaseModel):
    """A single user's session record.

    ``user_id`` and ``session_id`` are frozen: assigning to either after
    construction raises ``pydantic.ValidationError``.  ``parameters`` is an
    opaque JSON-compatible value owned by the caller.

    Parameters
    ----------
    user_id:
        Owner of the session.  Also determines the storage key.
    session_id:
        Identifier issued by the repository's ID generator.
    parameters:
        Arbitrary session payload (preferences, profile fields, ...).
    """

    user_id: int = Field(alias="userId", frozen=True)
    session_id: int = Field(alias="sessionId", frozen=True)
    parameters: Any = None

    model_config = {"populate_by_name": True}

    def serialize(self) -> str:
        """Return the canonical JSON encoding of this record."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def deserialize(cls, raw: str | bytes) -> SessionData:
        """Parse a payload produced by ``serialize``.

        Raises
        ------
        pydantic.ValidationError
            If ``raw`` is not valid JSON or lacks the required fields.
        """
        return cls.model_validate_json(raw)

    def __str__(self) -> str:
        return f"SessionData={self.serialize()}"


__all__ = ["SessionData"]
