"""
Bridge Exceptions.

Every failure the bridge can report maps to exactly one ErrorKind.
Errors propagate to the single handler in cli.main, which prints the
diagnostic and sets the exit code.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure categories."""

    TRANSPORT_ERROR = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"
    MISSING_FIELD = "missing_field"
    UNEXPECTED_TYPE = "unexpected_type"
    UNREPRESENTABLE_NUMBER = "unrepresentable_number"


class BridgeError(Exception):
    """Base class for all bridge failures."""

    kind: ErrorKind
    exit_code: int = 1

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class TransportError(BridgeError):
    """The RPC channel failed: connection, HTTP status, fault or undecodable body."""

    kind = ErrorKind.TRANSPORT_ERROR


class MalformedResponse(BridgeError):
    """Expected a struct, got another variant."""

    kind = ErrorKind.MALFORMED_RESPONSE


class MissingField(BridgeError):
    """Expected field absent from a struct."""

    kind = ErrorKind.MISSING_FIELD


class UnexpectedType(BridgeError):
    """Field present but holding the wrong variant."""

    kind = ErrorKind.UNEXPECTED_TYPE


class UnrepresentableNumber(BridgeError):
    """NaN or infinite double met during JSON conversion."""

    kind = ErrorKind.UNREPRESENTABLE_NUMBER
