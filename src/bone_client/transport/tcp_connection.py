"""TCP/TLS byte stream to a bone device.

The rest of the library only needs an object with blocking
``write_all``/``read_exact``/``close`` (see :class:`Stream`), so plain
sockets, TLS sockets and in-memory fakes are interchangeable.
"""

from __future__ import annotations

import logging
import socket
import ssl
from dataclasses import dataclass
from typing import Protocol

from ..config import ConnectionConfig
from ..exceptions import (
    BoneConnectionError,
    BoneIOError,
    BoneTimeoutError,
    StreamClosedError,
)

logger = logging.getLogger(__name__)

RECV_CHUNK_SIZE = 65536


class Stream(Protocol):
    """Blocking duplex byte stream."""

    def write_all(self, data: bytes) -> None: ...

    def read_exact(self, n: int) -> bytes: ...

    def close(self) -> None: ...


@dataclass
class PeerInfo:
    """Details of an established connection."""

    host: str = ""
    port: int = 0
    tls_version: str | None = None
    cipher: str | None = None


class SocketStream:
    """A connected socket, optionally wrapped in TLS.

    Usage::

        stream = open_stream(ConnectionConfig(host="10.0.0.7"))
        stream.write_all(request_bytes)
        header = stream.read_exact(8)
        stream.close()
    """

    def __init__(self, sock: socket.socket, peer: PeerInfo | None = None) -> None:
        self._sock = sock
        self._peer = peer or PeerInfo()
        self._closed = False

    @property
    def peer(self) -> PeerInfo:
        return self._peer

    @property
    def closed(self) -> bool:
        return self._closed

    def write_all(self, data: bytes) -> None:
        """Send every byte of ``data`` or raise.

        Raises:
            BoneTimeoutError: If the send exceeds the socket timeout.
            BoneIOError: If the socket fails or is closed.
        """
        if self._closed:
            raise BoneIOError("Stream is closed")
        try:
            self._sock.sendall(data)
        except socket.timeout as e:
            raise BoneTimeoutError(f"Timed out sending {len(data)} bytes") from e
        except OSError as e:
            raise BoneIOError(f"Write failed: {e}") from e

    def read_exact(self, n: int) -> bytes:
        """Receive exactly ``n`` bytes, looping over short reads.

        Raises:
            StreamClosedError: If the peer closes before ``n`` bytes arrive.
            BoneTimeoutError: If a receive exceeds the socket timeout.
            BoneIOError: If the socket fails.
        """
        if self._closed:
            raise BoneIOError("Stream is closed")
        buf = bytearray()
        while len(buf) < n:
            try:
                chunk = self._sock.recv(min(RECV_CHUNK_SIZE, n - len(buf)))
            except socket.timeout as e:
                raise BoneTimeoutError(
                    f"Timed out after receiving {len(buf)} of {n} bytes"
                ) from e
            except OSError as e:
                raise BoneIOError(f"Read failed: {e}") from e
            if not chunk:
                raise StreamClosedError(expected=n, received=len(buf))
            buf.extend(chunk)
        return bytes(buf)

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing socket: %s", e)


def _tls_context(config: ConnectionConfig) -> ssl.SSLContext:
    context = ssl.create_default_context(cafile=config.ca_file)
    if not config.verify_tls:
        # Devices present self-signed certificates.
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def open_stream(config: ConnectionConfig) -> SocketStream:
    """Connect to the device described by ``config``.

    Returns:
        A :class:`SocketStream` whose reads honour ``config.read_timeout``.

    Raises:
        BoneConnectionError: On resolution, connect or TLS handshake failure.
    """
    host = config.host
    port = config.resolved_port
    try:
        sock = socket.create_connection((host, port), timeout=config.connect_timeout)
    except OSError as e:
        raise BoneConnectionError(f"Could not connect to {config.address}: {e}") from e

    peer = PeerInfo(host=host, port=port)
    try:
        if config.use_tls:
            context = _tls_context(config)
            server_hostname = host.split("%", 1)[0] if config.verify_tls else None
            sock = context.wrap_socket(sock, server_hostname=server_hostname)
            peer.tls_version = sock.version()
            cipher = sock.cipher()
            peer.cipher = cipher[0] if cipher else None
        sock.settimeout(config.read_timeout)
    except OSError as e:
        sock.close()
        raise BoneConnectionError(
            f"Connection setup with {config.address} failed: {e}"
        ) from e

    logger.info(
        "Connected to %s (%s)",
        config.address,
        peer.tls_version or "plain TCP",
    )
    if config.use_tls and not config.verify_tls:
        logger.debug("TLS certificate verification is disabled")
    return SocketStream(sock, peer)
