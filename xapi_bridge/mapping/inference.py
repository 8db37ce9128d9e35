"""
Argument Inference.

Turns untyped CLI tokens into wire values. Candidates are tried in a fixed
order and the first exact, whole-token match wins:

    "true" / "false"        -> Bool
    [+-]digits in i64 range -> Int64
    float literal           -> Float64   ("1e10", "3.", ".5", "inf", "NaN")
    anything else           -> Str, verbatim

Python's int() and float() accept surrounding whitespace, underscores and
non-ASCII digits, so tokens are matched against explicit patterns first.
"""

import re
from collections.abc import Iterable

from xapi_bridge.rpc.values import INT64_MAX, INT64_MIN, Bool, Float64, Int64, Str, TypedValue

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(
    r"""
    [+-]?
    (?:
        (?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?
      | inf | infinity | nan
    )
    """,
    re.VERBOSE | re.IGNORECASE,
)


def _parse_bool(token: str) -> Bool | None:
    if token == "true":
        return Bool(True)
    if token == "false":
        return Bool(False)
    return None


def _parse_int64(token: str) -> Int64 | None:
    if not _INTEGER.fullmatch(token):
        return None
    number = int(token)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return Int64(number)


def _parse_float64(token: str) -> Float64 | None:
    if not _FLOAT.fullmatch(token):
        return None
    return Float64(float(token))


def infer(token: str) -> TypedValue:
    """Infer the wire value for one CLI token. Never fails."""
    for parse in (_parse_bool, _parse_int64, _parse_float64):
        value = parse(token)
        if value is not None:
            return value
    return Str(token)


def infer_all(tokens: Iterable[str]) -> tuple[TypedValue, ...]:
    """Infer call arguments, preserving order."""
    return tuple(infer(token) for token in tokens)
