"""Session: the public entry point for talking to a bone device.

Usage::

    with Session(ConnectionConfig(host="10.0.0.7")) as session:
        session.login("admin", "secret")
        print(session.send({"command": "board_temp"}))
        result = session.send_sync({"command": "sync", "payload": {"filter": ["int"]}})

One command is in flight at a time; every call blocks until its response
has been read in full. A framing, I/O or response-parsing failure leaves
the stream at an unknown position, so the session closes itself and must
be reconnected before further use.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable

from .config import ConnectionConfig
from .exceptions import (
    BoneConnectionError,
    BoneIOError,
    FramingError,
    NotConnectedError,
    SerializationError,
)
from .models.series import DeviceIdentity, SyncResult
from .models.value import is_number, lookup
from .protocol import auth
from .protocol.commands import (
    Family,
    build_cycle_time,
    build_serial_number,
    command_name,
    family_of,
    prepare_ks,
)
from .protocol.framing import Frame, encode_request, read_frame
from .protocol.serialization import SerializationMode, get_serializer
from .protocol.telemetry import (
    decode_channels,
    decode_float32,
    decode_hex_triplets,
    decode_sync,
    filter_labels,
)
from .transport.tcp_connection import Stream, open_stream

logger = logging.getLogger(__name__)

DEFAULT_CYCLE_TIME_S = 2e-4


class SessionState(Enum):
    CREATED = "created"
    CONNECTED = "connected"
    CLOSED = "closed"


class Session:
    """A connection to one device plus the operations it supports."""

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        opener: Callable[[ConnectionConfig], Stream] = open_stream,
    ) -> None:
        self._config = config or ConnectionConfig()
        self._opener = opener
        self._serializer = get_serializer(
            SerializationMode.MSGPACK if self._config.use_msgpack else SerializationMode.JSON
        )
        self._stream: Stream | None = None
        self._state = SessionState.CREATED

    def __enter__(self) -> Session:
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Session({self._config.address}, {self._serializer.mode.value}, "
            f"{self._state.value})"
        )

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is SessionState.CONNECTED

    @property
    def mode(self) -> SerializationMode:
        return self._serializer.mode

    # ─── LIFECYCLE ──────────────────────────────────────────────────────

    def connect(self) -> None:
        """Open the stream to the device.

        Raises:
            BoneConnectionError: If already connected or the device is
                unreachable.
        """
        if self._state is SessionState.CONNECTED:
            raise BoneConnectionError(f"Already connected to {self._config.address}")
        self._stream = self._opener(self._config)
        self._state = SessionState.CONNECTED

    def close(self) -> None:
        """Close the stream. Safe to call in any state."""
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.close()
            logger.info("Disconnected from %s", self._config.address)
        if self._state is SessionState.CONNECTED:
            self._state = SessionState.CLOSED

    def _require_stream(self) -> Stream:
        if self._state is not SessionState.CONNECTED or self._stream is None:
            raise NotConnectedError(
                f"Session is {self._state.value}; call connect() first"
            )
        return self._stream

    # ─── EXCHANGE ───────────────────────────────────────────────────────

    def _with_api(self, command: dict[str, Any]) -> dict[str, Any]:
        if self._config.api is None or "api" in command:
            return command
        return {**command, "api": self._config.api}

    def _exchange(self, command: dict[str, Any], positioned: bool) -> Frame:
        stream = self._require_stream()
        name = command_name(command)
        request = encode_request(self._with_api(command), self._serializer)

        start = time.monotonic()
        try:
            stream.write_all(request)
            frame = read_frame(stream, positioned=positioned)
        except (BoneIOError, FramingError):
            self._invalidate(name)
            raise
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.debug(
            "%s: sent %d bytes, received %r in %.1f ms",
            name,
            len(request),
            frame,
            elapsed_ms,
        )
        return frame

    def _invalidate(self, name: str) -> None:
        logger.warning("Closing session after failed %r exchange", name)
        self.close()

    # ─── OPERATIONS ─────────────────────────────────────────────────────

    def send(self, command: dict[str, Any]) -> Any:
        """Send a generic command and return the decoded response."""
        frame = self._exchange(command, positioned=False)
        try:
            return self._serializer.decode(frame.body)
        except SerializationError:
            self._invalidate(command_name(command))
            raise

    def login(self, username: str, password: str) -> str:
        """Authenticate this session.

        Returns:
            The username the device confirmed.

        Raises:
            AuthError: If the device rejects the credentials. The session
                stays connected and login may be retried.
        """
        return auth.login(self.send, username, password)

    def send_sync(self, command: dict[str, Any]) -> SyncResult:
        """Send a ``sync`` command; decode one chunk per filter label."""
        labels = filter_labels(command)
        frame = self._exchange(command, positioned=True)
        return SyncResult(frame.cursor, decode_sync(frame.body, labels))

    def send_ks(self, command: dict[str, Any]) -> SyncResult:
        """Send a ``ks`` command; samples come back as float32."""
        prepared, channel = prepare_ks(command)
        frame = self._exchange(prepared, positioned=True)
        return SyncResult(frame.cursor, [decode_float32(frame.body, f"channel {channel}")])

    def send_ks_sync(self, command: dict[str, Any]) -> SyncResult:
        """Send a ``ks_sync`` command; decode multiplexed channel records."""
        frame = self._exchange(command, positioned=True)
        return SyncResult(frame.cursor, decode_channels(frame.body))

    def send_dv(self, command: dict[str, Any]) -> list[float]:
        """Send a ``dv_data`` command; decode legacy hex samples."""
        frame = self._exchange(command, positioned=False)
        return decode_hex_triplets(frame.body)

    def dispatch(self, command: dict[str, Any]) -> Any:
        """Route a command to the operation matching its name."""
        family = family_of(command)
        if family is Family.SYNC:
            return self.send_sync(command)
        if family is Family.KS:
            return self.send_ks(command)
        if family is Family.KS_SYNC:
            return self.send_ks_sync(command)
        if family is Family.DV:
            return self.send_dv(command)
        return self.send(command)

    def identify(self) -> DeviceIdentity:
        """Query the serial number and alias of the device."""
        response = self.send(build_serial_number())
        serial_number = lookup(response, "payload", "serial_number")
        alias = lookup(response, "payload", "alias")
        return DeviceIdentity(
            serial_number=serial_number if isinstance(serial_number, str) else None,
            alias=alias if isinstance(alias, str) else None,
        )

    def cycle_time(self, family: Family | str = Family.SYNC) -> float:
        """Sample period in seconds for a sample family.

        Falls back to 200 µs when the device does not report one.
        """
        response = self.send(build_cycle_time(Family(family)))
        micros = lookup(response, "payload", "cycle_time")
        if not is_number(micros):
            return DEFAULT_CYCLE_TIME_S
        return micros * 1e-6

