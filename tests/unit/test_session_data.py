"""Unit tests for kv_sessions.session.data.SessionData."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from kv_sessions.session.data import SessionData


class TestSessionDataConstruction:
    def test_snake_case_names(self) -> None:
        data = SessionData(user_id=42, session_id=7, parameters={"locale": "en"})
        assert data.user_id == 42
        assert data.session_id == 7
        assert data.parameters == {"locale": "en"}

    def test_wire_names(self) -> None:
        data = SessionData(userId=42, sessionId=7)
        assert data.user_id == 42
        assert data.session_id == 7

    def test_parameters_default_to_none(self) -> None:
        assert SessionData(user_id=1, session_id=2).parameters is None

    def test_ids_are_required(self) -> None:
        with pytest.raises(ValidationError):
            SessionData(user_id=1)


class TestSessionDataImmutability:
    def test_user_id_is_frozen(self) -> None:
        data = SessionData(user_id=1, session_id=2)
        with pytest.raises(ValidationError):
            data.user_id = 99

    def test_session_id_is_frozen(self) -> None:
        data = SessionData(user_id=1, session_id=2)
        with pytest.raises(ValidationError):
            data.session_id = 99

    def test_parameters_can_be_replaced(self) -> None:
        data = SessionData(user_id=1, session_id=2, parameters={"a": 1})
        data.parameters = {"b": 2}
        assert data.parameters == {"b": 2}


class TestSessionDataSerialization:
    def test_serialize_uses_wire_names_in_declared_order(self) -> None:
        data = SessionData(user_id=42, session_id=7, parameters={"locale": "en"})
        assert data.serialize() == '{"userId":42,"sessionId":7,"parameters":{"locale":"en"}}'

    def test_serialize_null_parameters(self) -> None:
        raw = SessionData(user_id=1, session_id=2).serialize()
        assert json.loads(raw) == {"userId": 1, "sessionId": 2, "parameters": None}

    def test_deserialize_restores_nested_parameters(self) -> None:
        params = {"cart": [1, 2, {"sku": "x"}], "flags": {"beta": True}, "score": 1.5}
        original = SessionData(user_id=5, session_id=900, parameters=params)
        restored = SessionData.deserialize(original.serialize())
        assert restored == original
        assert restored.parameters == params

    def test_deserialize_accepts_snake_case(self) -> None:
        restored = SessionData.deserialize('{"user_id": 3, "session_id": 4}')
        assert (restored.user_id, restored.session_id) == (3, 4)

    def test_deserialize_bytes(self) -> None:
        restored = SessionData.deserialize(b'{"userId": 3, "sessionId": 4, "parameters": []}')
        assert restored.parameters == []

    def test_deserialize_rejects_garbage(self) -> None:
        with pytest.raises(ValidationError):
            SessionData.deserialize("not json")

    def test_deserialize_rejects_null(self) -> None:
        with pytest.raises(ValidationError):
            SessionData.deserialize("null")

    def test_str(self) -> None:
        data = SessionData(user_id=1, session_id=2)
        assert str(data) == 'SessionData={"userId":1,"sessionId":2,"parameters":null}'
