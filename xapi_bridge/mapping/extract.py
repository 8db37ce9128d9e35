"""
Response Field Extraction.

xapi wraps every result in a struct: ``{"Status": "Success", "Value": ...}``
or ``{"Status": "Failure", "ErrorDescription": [...]}``.
"""

from xapi_bridge.core.exceptions import MalformedResponse, MissingField, UnexpectedType
from xapi_bridge.rpc.values import Array, Str, Struct, TypedValue

VALUE_FIELD = "Value"


def _describe_failure(response: Struct) -> str | None:
    status = response.get("Status")
    description = response.get("ErrorDescription")
    if status != Str("Failure") or not isinstance(description, Array):
        return None
    return ", ".join(item.value if isinstance(item, Str) else repr(item) for item in description)


def extract_field(response: TypedValue, field: str) -> TypedValue:
    """
    Return the value stored under ``field`` in a struct response.

    Raises:
        MalformedResponse: If the response is not a struct.
        MissingField: If the struct has no such field.
    """
    if not isinstance(response, Struct):
        raise MalformedResponse(
            f"Malformed response: expected a struct, got {type(response).__name__}",
            variant=type(response).__name__,
        )

    value = response.get(field)
    if value is None:
        failure = _describe_failure(response)
        if failure is not None:
            raise MissingField(
                f"Response has no {field!r} field: server reported failure: {failure}",
                field=field,
                error_description=failure,
            )
        raise MissingField(
            f"Response has no {field!r} field (fields: {', '.join(response.keys()) or 'none'})",
            field=field,
        )
    return value


def extract_session(response: TypedValue) -> str:
    """
    Pull the session token out of a login response.

    Raises:
        MalformedResponse, MissingField: As extract_field.
        UnexpectedType: If the Value field is not a string.
    """
    value = extract_field(response, VALUE_FIELD)
    if not isinstance(value, Str):
        raise UnexpectedType(
            f"Mismatched type: session must be a string, got {type(value).__name__}",
            field=VALUE_FIELD,
            variant=type(value).__name__,
        )
    return value.value
