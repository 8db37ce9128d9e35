"""
Structural JSON Conversion.

Maps a TypedValue tree onto plain JSON data (None, bool, float, str, list,
dict) and renders it as text.

Integers become doubles, so magnitudes beyond 2**53 lose precision; the
output keeps that ceiling instead of switching to string-encoded integers.
Timestamps are emitted in their wire form, which is not guaranteed to be
ISO-8601 parseable. Object keys are sorted by name; wire order of struct
members is not significant.
"""

import base64
import json
import math
from typing import Any, assert_never

from xapi_bridge.core.exceptions import UnrepresentableNumber
from xapi_bridge.rpc.values import (
    Array,
    Binary,
    Bool,
    DateTime,
    Float64,
    Int32,
    Int64,
    Null,
    Str,
    Struct,
    TypedValue,
)

JSONValue = None | bool | float | str | list[Any] | dict[str, Any]


def _field_name(field: tuple[str, TypedValue]) -> str:
    return field[0]


def to_json(value: TypedValue) -> JSONValue:
    """
    Convert a wire value into JSON data.

    Raises:
        UnrepresentableNumber: If a Float64 anywhere in the tree is NaN or infinite.
    """
    if isinstance(value, Bool):
        return value.value
    if isinstance(value, (Int32, Int64)):
        return float(value.value)
    if isinstance(value, Float64):
        if not math.isfinite(value.value):
            raise UnrepresentableNumber(
                f"{value.value!r} cannot be represented as a JSON number",
                value=value.value,
            )
        return value.value
    if isinstance(value, Str):
        return value.value
    if isinstance(value, DateTime):
        return str(value)
    if isinstance(value, Binary):
        return base64.b64encode(value.value).decode("ascii")
    if isinstance(value, Array):
        return [to_json(item) for item in value.items]
    if isinstance(value, Struct):
        return {name: to_json(member) for name, member in sorted(value.fields, key=_field_name)}
    if isinstance(value, Null):
        return None
    assert_never(value)


def render(document: JSONValue, compact: bool = False) -> str:
    """Serialize converted JSON data, pretty-printed unless ``compact``."""
    if compact:
        return json.dumps(document, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    return json.dumps(document, ensure_ascii=False, allow_nan=False, indent=2)
