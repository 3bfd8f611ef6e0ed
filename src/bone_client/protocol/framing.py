"""Request framing and response frame reader.

Requests are the serialized body followed by ``\\r\\n``; no length is sent.

Response layout::

    +----------------+-----------------+-----------------------------+
    | Length         | Cursor          | Body                        |
    | 8 bytes ASCII  | 4 bytes BE int  | Length bytes (minus cursor) |
    | hex            | positioned only |                             |
    +----------------+-----------------+-----------------------------+

- Length: hexadecimal count of every byte after the header, cursor included
- Cursor: signed device read position; present only for ``sync``, ``ks``
  and ``ks_sync`` responses
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import Any

from ..exceptions import FramingError, StreamClosedError
from ..transport.tcp_connection import Stream
from .serialization import Serializer

logger = logging.getLogger(__name__)

TERMINATOR = b"\r\n"
HEADER_SIZE = 8
CURSOR_SIZE = 4

_HEX_DIGITS = frozenset(string.hexdigits.encode("ascii"))


@dataclass
class Frame:
    """A response frame read off the wire."""

    body: bytes
    cursor: int | None = None

    def __repr__(self) -> str:
        cursor = "" if self.cursor is None else f"cursor={self.cursor}, "
        return f"Frame({cursor}body={len(self.body)} bytes)"


def build_request(body: bytes) -> bytes:
    """Terminate a serialized body for sending."""
    return body + TERMINATOR


def encode_request(command: Any, serializer: Serializer) -> bytes:
    """Serialize ``command`` and frame it for sending."""
    return build_request(serializer.encode(command))


def parse_length_header(header: bytes) -> int:
    """Parse the 8-byte ASCII hex length header.

    Raises:
        FramingError: If the header is the wrong size or not pure hex digits.
    """
    if len(header) != HEADER_SIZE:
        raise FramingError(
            f"Length header must be {HEADER_SIZE} bytes, got {len(header)}"
        )
    if not all(b in _HEX_DIGITS for b in header):
        raise FramingError(f"Invalid length header: {header!r}")
    return int(header, 16)


def _read(stream: Stream, n: int, what: str) -> bytes:
    try:
        return stream.read_exact(n)
    except StreamClosedError as e:
        raise FramingError(
            f"Stream closed while reading {what}: "
            f"got {e.received} of {e.expected} bytes"
        ) from e


def read_frame(stream: Stream, positioned: bool = False) -> Frame:
    """Read one response frame.

    Args:
        stream: The connected stream, positioned at a frame boundary.
        positioned: Whether a 4-byte cursor precedes the body.

    Raises:
        FramingError: On a bad header, a declared length too short for the
            cursor, or a stream closed before the frame is complete.
        BoneIOError: If the stream itself fails.
    """
    length = parse_length_header(_read(stream, HEADER_SIZE, "length header"))

    cursor = None
    if positioned:
        if length < CURSOR_SIZE:
            raise FramingError(
                f"Declared length {length} cannot hold a {CURSOR_SIZE}-byte cursor"
            )
        cursor = int.from_bytes(_read(stream, CURSOR_SIZE, "cursor"), "big", signed=True)
        length -= CURSOR_SIZE

    body = _read(stream, length, "body") if length else b""
    logger.debug("Read frame: %d body bytes, cursor=%s", len(body), cursor)
    return Frame(body=body, cursor=cursor)
