"""Connection configuration for a bone device."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ConfigurationError

DEFAULT_HOST = "localhost"
TLS_PORT = 6451
PLAIN_PORT = 6450
CONNECT_TIMEOUT_S = 10.0
MAX_SERIAL = 0xFFFF


@dataclass
class ConnectionConfig:
    """Where and how to reach a device.

    TLS certificate verification is off unless ``verify_tls`` is set,
    because devices ship with self-signed certificates.

    Usage::

        cfg = ConnectionConfig(host="10.0.0.7", use_msgpack=True)
        cfg.resolved_port  # 6451
    """

    host: str = DEFAULT_HOST
    port: int | None = None
    use_tls: bool = True
    use_msgpack: bool = False
    verify_tls: bool = False
    ca_file: str | None = None
    connect_timeout: float | None = CONNECT_TIMEOUT_S
    read_timeout: float | None = None
    api: int | None = None

    def __post_init__(self) -> None:
        if not self.host:
            raise ConfigurationError("Host must not be empty")
        if self.port is not None and not 1 <= self.port <= 65535:
            raise ConfigurationError(f"Port must be 1-65535, got {self.port}")
        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

    @property
    def resolved_port(self) -> int:
        """The explicit port, or the default for the chosen transport."""
        if self.port is not None:
            return self.port
        return TLS_PORT if self.use_tls else PLAIN_PORT

    @property
    def address(self) -> str:
        return f"[{self.host}]:{self.resolved_port}"

    @classmethod
    def from_serial(cls, serial: int, interface: str, **kwargs) -> ConnectionConfig:
        """Build a config addressing a device by its IPv6 link-local address.

        Devices derive their link-local address from the serial number, so
        only the local interface they are attached to is needed.

        Args:
            serial: Device serial number (0-65535).
            interface: Local network interface name, e.g. ``eth0``.
        """
        if not 0 <= serial <= MAX_SERIAL:
            raise ConfigurationError(f"Serial must be 0-{MAX_SERIAL}, got {serial}")
        if not interface:
            raise ConfigurationError("An interface is required for link-local addressing")
        digits = f"{serial:04x}"
        host = f"fe80::b5:b1ff:fe{digits[:2]}:{digits[2:]}%{interface}"
        return cls(host=host, **kwargs)
