"""Shared fixtures: an in-memory stream standing in for the device."""

from __future__ import annotations

import json
import struct

import msgpack
import pytest

from bone_client.config import ConnectionConfig
from bone_client.exceptions import StreamClosedError
from bone_client.session import Session


class FakeStream:
    """Replays canned response bytes and records what was written."""

    def __init__(self, inbound: bytes = b"") -> None:
        self.inbound = bytearray(inbound)
        self.written = bytearray()
        self.closed = False

    def feed(self, data: bytes) -> None:
        self.inbound.extend(data)

    def write_all(self, data: bytes) -> None:
        self.written.extend(data)

    def read_exact(self, n: int) -> bytes:
        if len(self.inbound) < n:
            received = len(self.inbound)
            self.inbound.clear()
            raise StreamClosedError(expected=n, received=received)
        data = bytes(self.inbound[:n])
        del self.inbound[:n]
        return data

    def close(self) -> None:
        self.closed = True

    def requests(self) -> list[bytes]:
        """Split everything written into request bodies."""
        return [r for r in bytes(self.written).split(b"\r\n") if r]


def simple_frame(body: bytes) -> bytes:
    """Frame a body the way the device answers generic commands."""
    return f"{len(body):08x}".encode("ascii") + body


def positioned_frame(cursor: int, body: bytes) -> bytes:
    """Frame a body with a cursor, as for sync, ks and ks_sync."""
    return f"{len(body) + 4:08x}".encode("ascii") + struct.pack(">i", cursor) + body


def json_frame(value) -> bytes:
    return simple_frame(json.dumps(value).encode("utf-8"))


def msgpack_frame(value) -> bytes:
    return simple_frame(msgpack.packb(value, use_bin_type=True))


@pytest.fixture
def stream() -> FakeStream:
    return FakeStream()


@pytest.fixture
def make_session(stream):
    """Build a connected session over the fake stream."""

    def _make(**config_kwargs) -> Session:
        session = Session(ConnectionConfig(**config_kwargs), opener=lambda cfg: stream)
        session.connect()
        return session

    return _make
