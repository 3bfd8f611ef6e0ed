"""MCP server entry point for bone devices.

Exposes the session operations as tools via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import ConnectionConfig
from .exceptions import AuthError, DecodeError
from .protocol.commands import Family, build_command
from .session import Session

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "bone-client",
    instructions="MCP server for bone instrument-control devices",
)

# Global session state
_session: Session | None = None
_username: str | None = None


def _get_session() -> Session:
    """Get the active session, raising if not connected."""
    if _session is None or not _session.connected:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _session


def _command(name: str, payload: dict[str, Any] | None) -> dict[str, Any]:
    return build_command(name, payload, _get_session().config.api)


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(
    host: str = "localhost",
    port: int | None = None,
    unencrypted: bool = False,
    msgpack: bool = False,
    verify_tls: bool = False,
    api: int | None = 2,
) -> dict[str, Any]:
    """Open a connection to a bone device.

    Args:
        host: Hostname or IP address (IPv6 link-local addresses need a %interface suffix).
        port: TCP port; defaults to 6451 (TLS) or 6450 (unencrypted).
        unencrypted: Use plain TCP instead of TLS.
        msgpack: Encode messages as MessagePack instead of JSON.
        verify_tls: Verify the device certificate.
        api: API version stamped on commands built by these tools.
    """
    global _session, _username
    if _session is not None and _session.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "address": _session.config.address,
        }

    config = ConnectionConfig(
        host=host,
        port=port,
        use_tls=not unencrypted,
        use_msgpack=msgpack,
        verify_tls=verify_tls,
        api=api,
    )
    _session = Session(config)
    _session.connect()
    _username = None

    result: dict[str, Any] = {
        "connected": True,
        "address": config.address,
        "tls": config.use_tls,
        "mode": _session.mode.value,
    }
    result.update(_session.identify().to_dict())
    return result


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the connection to the device."""
    global _session, _username
    if _session is None:
        return {"disconnected": True}
    _session.close()
    _session = None
    _username = None
    return {"disconnected": True}


@mcp.tool()
def login(username: str, password: str) -> dict[str, Any]:
    """Authenticate the current connection.

    Args:
        username: Account name.
        password: Account password. It is hashed before it is sent.
    """
    global _username
    session = _get_session()
    try:
        _username = session.login(username, password)
    except AuthError as e:
        return {"authenticated": False, "error": str(e)}
    return {"authenticated": True, "username": _username}


@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Retrieve the device serial number and alias."""
    return _get_session().identify().to_dict()


# ─── COMMAND TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def send_command(command: dict[str, Any]) -> Any:
    """Send a raw command object and return the decoded response.

    Sample commands (sync, ks, ks_sync, dv_data) are decoded into series.

    Args:
        command: e.g. {"command": "channel_data", "payload": {"all": true}, "api": 2}.
    """
    session = _get_session()
    try:
        result = session.dispatch(command)
    except DecodeError as e:
        return {"error": str(e)}
    if isinstance(result, list):
        return {"samples": result}
    if hasattr(result, "to_dict"):
        return result.to_dict()
    return result


@mcp.tool()
def sync(payload: dict[str, Any] | None = None) -> dict[str, Any]:
    """Read buffered samples, one series per filter label.

    Args:
        payload: e.g. {"filter": ["saw", "int"]}; default filter is saw, int2, coe, int.
    """
    session = _get_session()
    try:
        return session.send_sync(_command("sync", payload)).to_dict()
    except DecodeError as e:
        return {"error": str(e)}


@mcp.tool()
def ks(payload: dict[str, Any] | None = None) -> dict[str, Any]:
    """Read float samples for one channel.

    Args:
        payload: e.g. {"channel": 3}; channel defaults to 0.
    """
    session = _get_session()
    try:
        return session.send_ks(_command("ks", payload)).to_dict()
    except DecodeError as e:
        return {"error": str(e)}


@mcp.tool()
def ks_sync(payload: dict[str, Any] | None = None) -> dict[str, Any]:
    """Read multiplexed samples, one series per active channel."""
    session = _get_session()
    try:
        return session.send_ks_sync(_command("ks_sync", payload)).to_dict()
    except DecodeError as e:
        return {"error": str(e)}


@mcp.tool()
def dv_data(payload: dict[str, Any] | None = None) -> dict[str, Any]:
    """Read legacy voltage samples."""
    session = _get_session()
    try:
        return {"samples": session.send_dv(_command("dv_data", payload))}
    except DecodeError as e:
        return {"error": str(e)}


@mcp.tool()
def get_cycle_time(family: str = "sync") -> dict[str, Any]:
    """Get the sample period for a sample family.

    Args:
        family: sync, ks or ks_sync.
    """
    try:
        target = Family(family)
    except ValueError:
        return {"error": f"Unknown family '{family}'. Valid: sync, ks, ks_sync"}
    if not target.positioned:
        return {"error": f"Family '{family}' has no cycle time"}
    return {"family": target.value, "cycle_time_s": _get_session().cycle_time(target)}


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("bone://session/status")
def resource_session_status() -> str:
    """Connection status of the current session."""
    if _session is None:
        return json.dumps({"connected": False})
    return json.dumps({
        "connected": _session.connected,
        "state": _session.state.value,
        "address": _session.config.address,
        "mode": _session.mode.value,
        "username": _username,
    }, indent=2)


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
