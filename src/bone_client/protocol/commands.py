"""Command names, response families and command builders.

A command is a plain ``dict``::

    {"command": "channel_data", "payload": {"all": true}, "api": 2}

The ``command`` name selects how the response is framed and decoded.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any

from ..models.value import MISSING, is_number, lookup


class Family(str, Enum):
    """How a command's response is framed and decoded."""

    GENERIC = "generic"
    SYNC = "sync"
    KS = "ks"
    KS_SYNC = "ks_sync"
    DV = "dv_data"

    @property
    def positioned(self) -> bool:
        """Whether responses carry a cursor before the body."""
        return self in (Family.SYNC, Family.KS, Family.KS_SYNC)


REQUEST_TOKEN = "request_token"
AUTH = "auth"
SERIAL_NUMBER = "serial_number"
CYCLE_TIME = "cycle_time"
KS_CYCLE_TIME = "ks_cycle_time"

FAMILY_BY_NAME: dict[str, Family] = {
    "sync": Family.SYNC,
    "ks": Family.KS,
    "ks_sync": Family.KS_SYNC,
    "dv_data": Family.DV,
}

# Cycle-time query answering for each sample family
CYCLE_TIME_COMMANDS: dict[Family, str] = {
    Family.SYNC: CYCLE_TIME,
    Family.KS: KS_CYCLE_TIME,
    Family.KS_SYNC: KS_CYCLE_TIME,
}


def build_command(
    name: str, payload: Any = None, api: int | None = None
) -> dict[str, Any]:
    """Build a command object.

    Args:
        name: Command name.
        payload: Optional structured payload.
        api: Optional API version.
    """
    if not isinstance(name, str) or not name:
        raise ValueError(f"Command name must be a non-empty string, got {name!r}")
    command: dict[str, Any] = {"command": name}
    if payload is not None:
        command["payload"] = payload
    if api is not None:
        command["api"] = api
    return command


def command_name(command: Any) -> str:
    """Return the ``command`` field, validating the command shape."""
    name = lookup(command, "command")
    if not isinstance(name, str) or not name:
        raise ValueError("Command must be an object with a string 'command' field")
    return name


def family_of(command: Any) -> Family:
    """Classify a command by name."""
    return FAMILY_BY_NAME.get(command_name(command), Family.GENERIC)


def build_request_token() -> dict[str, Any]:
    """Build the first login step."""
    return build_command(REQUEST_TOKEN)


def build_auth(username: str, signed_token: str) -> dict[str, Any]:
    """Build the second login step."""
    return build_command(
        AUTH, {"signed_token": signed_token, "username": username}
    )


def build_serial_number() -> dict[str, Any]:
    return build_command(SERIAL_NUMBER)


def build_cycle_time(family: Family) -> dict[str, Any]:
    """Build the cycle-time query for a sample family."""
    if family not in CYCLE_TIME_COMMANDS:
        raise ValueError(f"No cycle time for {family.value!r} commands")
    return build_command(CYCLE_TIME_COMMANDS[family])


def prepare_ks(command: dict[str, Any]) -> tuple[dict[str, Any], int]:
    """Copy a ``ks`` command with float samples requested.

    Returns:
        The command to send and the channel its samples belong to
        (``payload.channel`` when it is a whole number, else 0).
    """
    prepared = copy.deepcopy(command)
    payload = prepared.get("payload")
    if not isinstance(payload, dict):
        payload = {}
        prepared["payload"] = payload
    payload["float"] = True

    channel = lookup(payload, "channel")
    if channel is MISSING or not is_number(channel):
        return prepared, 0
    if isinstance(channel, float) and not channel.is_integer():
        return prepared, 0
    return prepared, int(channel)
