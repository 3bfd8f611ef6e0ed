"""Client for bone instrument-control devices.

Layers, lowest first:

1. **transport**: blocking TCP/TLS streams
2. **protocol**: serialization, framing, login handshake, telemetry decoders
3. **session**: one connection and the operations it supports

Example usage::

    from bone_client import ConnectionConfig, Session

    with Session(ConnectionConfig(host="10.0.0.7")) as session:
        session.login("admin", "secret")
        result = session.send_sync({"command": "sync"})
        for series in result.series:
            print(series.name, len(series))
"""

from .config import ConnectionConfig
from .exceptions import (
    AuthError,
    BoneConnectionError,
    BoneError,
    BoneIOError,
    BoneTimeoutError,
    ConfigurationError,
    DecodeError,
    FramingError,
    NotConnectedError,
    SerializationError,
    StreamClosedError,
)
from .models import MISSING, DeviceIdentity, Series, SyncResult, lookup
from .protocol import Family, SerializationMode, build_command
from .session import Session, SessionState

__version__ = "0.1.0"

__all__ = [
    "ConnectionConfig",
    "Session",
    "SessionState",
    "Family",
    "SerializationMode",
    "build_command",
    "Series",
    "SyncResult",
    "DeviceIdentity",
    "MISSING",
    "lookup",
    "BoneError",
    "BoneConnectionError",
    "NotConnectedError",
    "BoneIOError",
    "StreamClosedError",
    "BoneTimeoutError",
    "FramingError",
    "SerializationError",
    "AuthError",
    "DecodeError",
    "ConfigurationError",
]
