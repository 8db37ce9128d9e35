"""
XML-RPC Wire Codec.

Maps TypedValue trees to and from XML-RPC documents. The stdlib
xmlrpc.client marshaller works on untagged Python objects and rejects
64-bit integers, so requests are written here variant by variant and
responses are parsed straight into TypedValues, keeping the i4/i8
distinction and the raw dateTime text.

Faults and undecodable bodies are channel failures and raise
TransportError.
"""

import base64
import binascii
import math
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import assert_never
from xml.sax.saxutils import escape

from xapi_bridge.core.exceptions import TransportError
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

XML_DECLARATION = "<?xml version='1.0'?>\n"


# =============================================================================
# Encoding
# =============================================================================


def _format_double(number: float) -> str:
    """Shortest round-tripping digits, in plain decimal notation for finite values."""
    if not math.isfinite(number):
        return repr(number)
    return format(Decimal(repr(number)), "f")


def _encode_value(value: TypedValue, out: list[str]) -> None:
    if isinstance(value, Bool):
        out.append(f"<value><boolean>{int(value.value)}</boolean></value>")
    elif isinstance(value, Int32):
        out.append(f"<value><int>{value.value}</int></value>")
    elif isinstance(value, Int64):
        out.append(f"<value><i8>{value.value}</i8></value>")
    elif isinstance(value, Float64):
        out.append(f"<value><double>{_format_double(value.value)}</double></value>")
    elif isinstance(value, Str):
        out.append(f"<value><string>{escape(value.value)}</string></value>")
    elif isinstance(value, DateTime):
        out.append(f"<value><dateTime.iso8601>{escape(str(value))}</dateTime.iso8601></value>")
    elif isinstance(value, Binary):
        encoded = base64.b64encode(value.value).decode("ascii")
        out.append(f"<value><base64>{encoded}</base64></value>")
    elif isinstance(value, Array):
        out.append("<value><array><data>")
        for item in value.items:
            _encode_value(item, out)
        out.append("</data></array></value>")
    elif isinstance(value, Struct):
        out.append("<value><struct>")
        for name, member in value.fields:
            out.append(f"<member><name>{escape(name)}</name>")
            _encode_value(member, out)
            out.append("</member>")
        out.append("</struct></value>")
    elif isinstance(value, Null):
        out.append("<value><nil/></value>")
    else:
        assert_never(value)


def _encode_params(params: list[TypedValue] | tuple[TypedValue, ...], out: list[str]) -> None:
    out.append("<params>\n")
    for param in params:
        out.append("<param>")
        _encode_value(param, out)
        out.append("</param>\n")
    out.append("</params>\n")


def encode_call(method: str, params: list[TypedValue] | tuple[TypedValue, ...]) -> bytes:
    """Serialize a methodCall document."""
    out = [XML_DECLARATION, "<methodCall>\n", f"<methodName>{escape(method)}</methodName>\n"]
    _encode_params(params, out)
    out.append("</methodCall>\n")
    return "".join(out).encode("utf-8")


def encode_response(value: TypedValue) -> bytes:
    """Serialize a successful methodResponse document."""
    out = [XML_DECLARATION, "<methodResponse>\n"]
    _encode_params((value,), out)
    out.append("</methodResponse>\n")
    return "".join(out).encode("utf-8")


def encode_fault(code: int, message: str) -> bytes:
    """Serialize a fault methodResponse document."""
    out = [XML_DECLARATION, "<methodResponse>\n<fault>\n"]
    _encode_value(
        Struct((("faultCode", Int32(code)), ("faultString", Str(message)))),
        out,
    )
    out.append("\n</fault>\n</methodResponse>\n")
    return "".join(out).encode("utf-8")


# =============================================================================
# Decoding
# =============================================================================


def _scalar_text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _decode_value(element: ET.Element) -> TypedValue:
    if element.tag != "value":
        raise TransportError(f"Expected <value>, got <{element.tag}>")

    children = list(element)
    if not children:
        # Untyped value defaults to string, whitespace preserved
        return Str(element.text or "")

    typed = children[0]
    tag = typed.tag

    try:
        if tag in ("int", "i4"):
            return Int32(int(_scalar_text(typed)))
        if tag == "i8":
            return Int64(int(_scalar_text(typed)))
        if tag == "boolean":
            text = _scalar_text(typed)
            if text not in ("0", "1"):
                raise TransportError(f"Invalid boolean value: {text!r}")
            return Bool(text == "1")
        if tag == "double":
            return Float64(float(_scalar_text(typed)))
        if tag == "string":
            return Str(typed.text or "")
        if tag == "dateTime.iso8601":
            return DateTime.from_text(_scalar_text(typed))
        if tag == "base64":
            return Binary(base64.b64decode(_scalar_text(typed), validate=False))
        if tag == "nil":
            return Null()
        if tag == "array":
            data = typed.find("data")
            if data is None:
                raise TransportError("<array> without <data>")
            return Array(tuple(_decode_value(item) for item in data))
        if tag == "struct":
            return Struct(tuple(_decode_member(member) for member in typed))
    except (ValueError, binascii.Error) as e:
        raise TransportError(f"Invalid <{tag}> value: {e}") from e

    raise TransportError(f"Unsupported XML-RPC type: <{tag}>")


def _decode_member(member: ET.Element) -> tuple[str, TypedValue]:
    name = member.find("name")
    value = member.find("value")
    if member.tag != "member" or name is None or value is None:
        raise TransportError("Malformed struct <member>")
    return name.text or "", _decode_value(value)


def _parse(data: bytes | str, root_tag: str) -> ET.Element:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise TransportError(f"Response is not valid XML: {e}") from e
    if root.tag != root_tag:
        raise TransportError(f"Expected <{root_tag}>, got <{root.tag}>")
    return root


def _single_param(root: ET.Element) -> TypedValue:
    value = root.find("params/param/value")
    if value is None:
        raise TransportError("Response has no <params><param><value>")
    return _decode_value(value)


def decode_response(data: bytes | str) -> TypedValue:
    """
    Parse a methodResponse document.

    Raises:
        TransportError: On a fault response or a body that cannot be decoded.
    """
    root = _parse(data, "methodResponse")

    fault = root.find("fault/value")
    if fault is not None:
        detail = _decode_value(fault)
        code = detail.get("faultCode") if isinstance(detail, Struct) else None
        message = detail.get("faultString") if isinstance(detail, Struct) else None
        fault_code = getattr(code, "value", None)
        fault_string = getattr(message, "value", "")
        raise TransportError(
            f"XML-RPC fault {fault_code}: {fault_string}",
            fault_code=fault_code,
            fault_string=fault_string,
        )

    return _single_param(root)


def decode_call(data: bytes | str) -> tuple[str, tuple[TypedValue, ...]]:
    """Parse a methodCall document into (method name, params)."""
    root = _parse(data, "methodCall")
    name = root.find("methodName")
    if name is None or not name.text:
        raise TransportError("Call has no <methodName>")
    params = tuple(_decode_value(value) for value in root.findall("params/param/value"))
    return name.text.strip(), params
