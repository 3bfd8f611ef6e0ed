"""Token/challenge login handshake.

The device hands out a single-use token; the client proves knowledge of
the password by returning ``sha512hex(sha512hex(password) + token)``::

    client                                   device
      | {"command": "request_token"}           |
      | -------------------------------------> |
      |          {"payload": {"token": "..."}} |
      | <------------------------------------- |
      | {"command": "auth", "payload":         |
      |   {"signed_token": ..., "username": ...}}
      | -------------------------------------> |
      |   {"payload": {"username": ...}}       |
      |   or {"payload": {"error": ...}}       |
      | <------------------------------------- |
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable

from ..exceptions import AuthError
from ..models.value import lookup
from .commands import build_auth, build_request_token

logger = logging.getLogger(__name__)

Exchange = Callable[[dict[str, Any]], Any]


def sha512_hex(text: str) -> str:
    return hashlib.sha512(text.encode("utf-8")).hexdigest()


def hash_password(password: str) -> str:
    """Lowercase hex SHA-512 of the password."""
    return sha512_hex(password)


def sign_token(password: str, token: str) -> str:
    """Sign a login token with the password hash."""
    return sha512_hex(hash_password(password) + token)


def login(exchange: Exchange, username: str, password: str) -> str:
    """Run the two round-trip handshake.

    Args:
        exchange: Sends a generic command and returns the decoded response.
        username: Account name.
        password: Plain-text password; only its hash leaves this function.

    Returns:
        The username the device reports as authenticated.

    Raises:
        AuthError: If no usable token is issued, the device rejects the
            credentials, or the reply lacks a username.
    """
    response = exchange(build_request_token())
    token = lookup(response, "payload", "token")
    if not isinstance(token, str):
        raise AuthError("Device did not issue a login token")

    response = exchange(build_auth(username, sign_token(password, token)))
    error = lookup(response, "payload", "error")
    if isinstance(error, str):
        raise AuthError(error)

    authenticated = lookup(response, "payload", "username")
    if not isinstance(authenticated, str):
        raise AuthError("Device reply to auth carried no username")

    logger.info("Authenticated as %s", authenticated)
    return authenticated
