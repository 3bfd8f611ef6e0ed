"""Field lookup over decoded JSON/MessagePack values.

Responses are plain ``dict``/``list``/scalar trees. Lookups never invent a
default: a missing key, an out-of-range index or a step into a scalar all
yield :data:`MISSING`, which callers test for explicitly.
"""

from __future__ import annotations

from typing import Any


class _Missing:
    """Marker for an absent field."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def lookup(value: Any, *path: str | int) -> Any:
    """Follow ``path`` through nested objects and arrays.

    String steps index objects, integer steps index arrays.

    >>> lookup({"payload": {"token": "abc"}}, "payload", "token")
    'abc'
    >>> lookup({"payload": None}, "payload", "token")
    MISSING
    """
    current = value
    for step in path:
        if isinstance(step, str):
            if not isinstance(current, dict) or step not in current:
                return MISSING
            current = current[step]
        else:
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return MISSING
            current = current[step]
    return current


def is_number(value: Any) -> bool:
    """True for JSON numbers. Booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)
