"""bone_client library exceptions.

Every error raised by the library derives from :class:`BoneError`, so
callers can report the kind and message of any failure with one handler.
"""


class BoneError(Exception):
    """Base exception for bone protocol errors"""
    pass


class ConfigurationError(BoneError):
    """Raised when connection configuration is invalid"""
    pass


class BoneConnectionError(BoneError):
    """Raised when the device cannot be reached (DNS, TCP connect or TLS)"""
    pass


class NotConnectedError(BoneError):
    """Raised when an operation needs an open session and there is none"""
    pass


class BoneIOError(BoneError):
    """Raised when the stream breaks mid-transfer"""
    pass


class StreamClosedError(BoneIOError):
    """Raised when the peer closes the stream before a read is satisfied"""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"Stream closed after {received} of {expected} bytes"
        )
        self.expected = expected
        self.received = received


class BoneTimeoutError(BoneIOError):
    """Raised when a read or write exceeds the configured timeout"""
    pass


class FramingError(BoneError):
    """Raised when a response frame is malformed or truncated.

    The stream is desynchronized afterwards and must not be reused.
    """
    pass


class SerializationError(BoneError):
    """Raised when a message cannot be encoded or a body cannot be parsed"""
    pass


class AuthError(BoneError):
    """Raised when the login handshake is rejected or malformed"""
    pass


class DecodeError(BoneError):
    """Raised when a telemetry body does not match its record layout"""
    pass
