"""Session ID obfuscation helper."""
from __future__ import annotations


def encode_session_id(value: int) -> int:
    """Return ``value`` with its binary digits reversed.

    ``0b1101`` (13) becomes ``0b1011`` (11); ``0b1000`` (8) becomes ``1``.
    Trailing zero bits are dropped, so the mapping is not injective.

    Raises
    ------
    ValueError
        If ``value`` is negative.
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative session id {value!r}")
    encoded = 0
    while value != 0:
        encoded <<= 1
        encoded |= value & 1
        value >>= 1
    return encoded


__all__ = ["encode_session_id"]
