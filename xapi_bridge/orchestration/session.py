"""
Session Lifecycle.

A session is acquired with session.login_with_password and released with
session.logout. The token lives only for the duration of one ``with``
block and is never cached or persisted.

Usage:
    with open_session(channel, "root", "secret") as token:
        channel.call("VM.get_all", [Str(token)])
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from xapi_bridge.core.exceptions import BridgeError
from xapi_bridge.core.logging import get_logger, log_with_source
from xapi_bridge.mapping.extract import extract_session
from xapi_bridge.rpc.values import Str, TypedValue

logger = get_logger(__name__)

LOGIN_METHOD = "session.login_with_password"
LOGOUT_METHOD = "session.logout"


class Channel(Protocol):
    """Anything that can issue a synchronous RPC call."""

    def call(self, method: str, args: list[TypedValue] | tuple[TypedValue, ...]) -> TypedValue: ...


def login(channel: Channel, user: str, password: str) -> str:
    """
    Authenticate and return the session token.

    Raises:
        TransportError: If the login call fails.
        MalformedResponse, MissingField, UnexpectedType: If no token can be extracted.
    """
    response = channel.call(LOGIN_METHOD, [Str(user), Str(password)])
    token = extract_session(response)
    log_with_source(logger, "session", "info", "Session opened", user=user)
    return token


def logout(channel: Channel, token: str) -> None:
    """Release the session. Failures are logged and discarded."""
    try:
        channel.call(LOGOUT_METHOD, [Str(token)])
    except BridgeError as e:
        log_with_source(logger, "session", "warning", "Logout failed", error=str(e), kind=e.kind.value)
        return
    except Exception as e:
        log_with_source(logger, "session", "warning", "Logout failed", error=str(e))
        return
    log_with_source(logger, "session", "info", "Session closed")


@contextmanager
def open_session(channel: Channel, user: str, password: str) -> Iterator[str]:
    """
    Hold a session for the duration of the block.

    A failed login propagates and nothing is released. Once logged in,
    logout is attempted exactly once on every exit path; its own failure
    never replaces the block's outcome.
    """
    token = login(channel, user, password)
    try:
        yield token
    finally:
        logout(channel, token)
