"""
Call Orchestration.

login -> target call -> logout, strictly in that order:

    Unauthenticated --login--> Authenticated --target call, emit--> --logout--> Closed

The target call receives the session token as its first argument,
followed by the caller's arguments in order.
"""

from collections.abc import Callable, Sequence

from xapi_bridge.core.logging import get_logger, log_with_source
from xapi_bridge.mapping.extract import VALUE_FIELD, extract_field
from xapi_bridge.mapping.json_converter import JSONValue, to_json
from xapi_bridge.orchestration.session import Channel, open_session
from xapi_bridge.rpc.values import Str, TypedValue

logger = get_logger(__name__)


def method_name(class_name: str, method: str) -> str:
    return f"{class_name}.{method}"


def invoke(
    channel: Channel,
    class_name: str,
    method: str,
    arguments: Sequence[TypedValue],
    *,
    user: str,
    password: str,
    emit: Callable[[JSONValue], None],
) -> JSONValue:
    """
    Run one target call inside a session and emit its JSON result.

    Args:
        channel: RPC channel.
        class_name: xapi class, e.g. ``VM``.
        method: xapi method, e.g. ``get_all``.
        arguments: Call arguments, without the session.
        user: Login user name.
        password: Login password.
        emit: Receives the converted document before the session is released.

    Returns:
        The converted JSON document.

    Raises:
        BridgeError: Any failure before the document is emitted.
    """
    target = method_name(class_name, method)

    with open_session(channel, user, password) as token:
        log_with_source(logger, "session", "debug", "Calling target", method=target, arg_count=len(arguments))
        response = channel.call(target, [Str(token), *arguments])
        document = to_json(extract_field(response, VALUE_FIELD))
        emit(document)

    return document
