"""Tests for connection configuration."""

import pytest

from bone_client.config import PLAIN_PORT, TLS_PORT, ConnectionConfig
from bone_client.exceptions import ConfigurationError


def test_default_ports():
    """The port follows the transport unless set explicitly."""
    assert ConnectionConfig().resolved_port == TLS_PORT == 6451
    assert ConnectionConfig(use_tls=False).resolved_port == PLAIN_PORT == 6450
    assert ConnectionConfig(port=7000).resolved_port == 7000


def test_defaults():
    cfg = ConnectionConfig()
    assert cfg.host == "localhost"
    assert cfg.use_tls
    assert not cfg.use_msgpack
    assert not cfg.verify_tls
    assert cfg.read_timeout is None


def test_address():
    assert ConnectionConfig(host="10.0.0.7").address == "[10.0.0.7]:6451"


@pytest.mark.parametrize("kwargs", [
    {"port": 0},
    {"port": 70000},
    {"host": ""},
    {"connect_timeout": 0},
    {"read_timeout": -1.0},
])
def test_invalid_config(kwargs):
    with pytest.raises(ConfigurationError):
        ConnectionConfig(**kwargs)


def test_from_serial():
    """Link-local address embeds the serial as two hex byte groups."""
    cfg = ConnectionConfig.from_serial(0x12AB, "eth0", use_tls=False)
    assert cfg.host == "fe80::b5:b1ff:fe12:ab%eth0"
    assert not cfg.use_tls


def test_from_serial_pads_small_numbers():
    assert ConnectionConfig.from_serial(5, "en0").host == "fe80::b5:b1ff:fe00:05%en0"


@pytest.mark.parametrize("serial, interface", [(-1, "eth0"), (0x10000, "eth0"), (1, "")])
def test_from_serial_invalid(serial, interface):
    with pytest.raises(ConfigurationError):
        ConnectionConfig.from_serial(serial, interface)
