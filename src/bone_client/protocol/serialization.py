"""JSON and MessagePack message bodies.

Both modes produce and consume the same value shape (the JSON data model:
``None``, ``bool``, ``int``, ``float``, ``str``, ``list``, ``dict`` with
string keys), so nothing above this module cares which one is in use.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

import msgpack

from ..exceptions import SerializationError


class SerializationMode(str, Enum):
    """Wire encoding of message bodies, fixed per session."""

    JSON = "json"
    MSGPACK = "msgpack"


def _key_text(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, (bool, int, float)):
        return json.dumps(key)
    raise SerializationError(f"Unsupported object key type: {type(key).__name__}")


def normalize(value: Any) -> Any:
    """Convert a decoded or caller-built value into the JSON data model.

    Tuples become lists, binary blobs become lists of byte values,
    MessagePack extension values become ``[code, [bytes...]]`` and scalar
    object keys become their JSON text. Anything else is rejected.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    if isinstance(value, dict):
        return {_key_text(k): normalize(v) for k, v in value.items()}
    if isinstance(value, (bytes, bytearray, memoryview)):
        return list(bytes(value))
    if isinstance(value, msgpack.ExtType):
        return [value.code, list(value.data)]
    raise SerializationError(f"Unsupported value type: {type(value).__name__}")


class JsonSerializer:
    """Compact UTF-8 JSON text."""

    mode = SerializationMode.JSON

    def encode(self, value: Any) -> bytes:
        try:
            text = json.dumps(
                value, separators=(",", ":"), ensure_ascii=False, allow_nan=False
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode JSON: {e}") from e
        return text.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise SerializationError(f"Response is not UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid JSON: {e}") from e


class MsgpackSerializer:
    """MessagePack bodies, normalized to the JSON data model."""

    mode = SerializationMode.MSGPACK

    def encode(self, value: Any) -> bytes:
        canonical = normalize(value)
        try:
            return msgpack.packb(canonical, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as e:
            raise SerializationError(f"Cannot encode MessagePack: {e}") from e

    def decode(self, data: bytes) -> Any:
        try:
            value = msgpack.unpackb(data, raw=False, strict_map_key=False)
        except (msgpack.UnpackException, ValueError, TypeError) as e:
            raise SerializationError(f"Invalid MessagePack: {e}") from e
        return normalize(value)


Serializer = JsonSerializer | MsgpackSerializer


def get_serializer(mode: SerializationMode | str) -> Serializer:
    """Return the serializer for ``mode``."""
    mode = SerializationMode(mode)
    if mode is SerializationMode.MSGPACK:
        return MsgpackSerializer()
    return JsonSerializer()
