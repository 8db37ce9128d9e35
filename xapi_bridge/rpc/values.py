"""
TypedValue Model.

Closed tagged union of every XML-RPC wire value. Each variant is a frozen
dataclass; ``TypedValue`` is the union of exactly these ten classes and
consumers match on it exhaustively (see mapping.json_converter).

Values form a strict tree: containers hold tuples, never shared mutable
state, so a value cannot be changed or made cyclic after construction.
"""

import xmlrpc.client
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Int32:
    value: int

    def __post_init__(self) -> None:
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f"{self.value} does not fit in a signed 32-bit integer")


@dataclass(frozen=True)
class Int64:
    value: int

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise ValueError(f"{self.value} does not fit in a signed 64-bit integer")


@dataclass(frozen=True)
class Float64:
    value: float


@dataclass(frozen=True)
class Str:
    value: str


@dataclass(frozen=True)
class DateTime:
    """
    A dateTime.iso8601 value, kept in its wire lexical form.

    xapi sends timestamps such as ``20240102T03:04:05Z``; the text is kept
    as-is rather than normalised, and ``str()`` returns it unchanged.
    """

    value: xmlrpc.client.DateTime

    @classmethod
    def from_text(cls, text: str) -> "DateTime":
        return cls(xmlrpc.client.DateTime(text))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Binary:
    value: bytes


@dataclass(frozen=True)
class Array:
    items: tuple["TypedValue", ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator["TypedValue"]:
        return iter(self.items)


@dataclass(frozen=True)
class Struct:
    """
    Ordered field map with unique names.

    Order is kept for display only; two structs with the same fields in a
    different order still compare unequal as dataclasses, so compare
    ``dict(s.fields)`` when order does not matter.
    """

    fields: tuple[tuple[str, "TypedValue"], ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for name, _ in self.fields:
            if name in seen:
                raise ValueError(f"Duplicate struct member: {name!r}")
            seen.add(name)

    @classmethod
    def of(cls, mapping: Mapping[str, "TypedValue"]) -> "Struct":
        return cls(tuple(mapping.items()))

    def get(self, name: str) -> "TypedValue | None":
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def keys(self) -> list[str]:
        return [name for name, _ in self.fields]

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self.fields)

    def __len__(self) -> int:
        return len(self.fields)


@dataclass(frozen=True)
class Null:
    pass


TypedValue = Union[Bool, Int32, Int64, Float64, Str, DateTime, Binary, Array, Struct, Null]

VARIANTS: tuple[type, ...] = (Bool, Int32, Int64, Float64, Str, DateTime, Binary, Array, Struct, Null)


def lift(obj: Any) -> TypedValue:
    """
    Build a TypedValue tree from plain Python data.

    ints become Int32 when they fit, Int64 otherwise; datetimes are written
    in xapi's ``%Y%m%dT%H:%M:%SZ`` form. TypedValues pass through unchanged.

    Raises:
        TypeError: For objects with no wire representation.
    """
    if isinstance(obj, VARIANTS):
        return obj
    if obj is None:
        return Null()
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, int):
        return Int32(obj) if INT32_MIN <= obj <= INT32_MAX else Int64(obj)
    if isinstance(obj, float):
        return Float64(obj)
    if isinstance(obj, str):
        return Str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return Binary(bytes(obj))
    if isinstance(obj, datetime):
        return DateTime.from_text(obj.strftime("%Y%m%dT%H:%M:%SZ"))
    if isinstance(obj, xmlrpc.client.DateTime):
        return DateTime(obj)
    if isinstance(obj, Mapping):
        return Struct(tuple((str(k), lift(v)) for k, v in obj.items()))
    if isinstance(obj, Iterable):
        return Array(tuple(lift(item) for item in obj))
    raise TypeError(f"Cannot represent {type(obj).__name__} as a wire value")
