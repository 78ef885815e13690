# src/udon/events/values.py

"""Literal classification and quoted-string unescaping.

Bare literals are classified in a fixed priority order:
keyword (bool / nil) -> rational -> complex -> float -> integer -> string.

A rational needs a nonzero denominator. `1/0` has no numeric value and
falls through to a StringValue rather than a RationalValue.
"""

import re

from udon.arena import ChunkSlice

from .base import Span
from .events import (
    BoolValue,
    ComplexValue,
    FloatValue,
    IntegerValue,
    NilValue,
    RationalValue,
    ScalarValue,
    StringValue,
)

_DIGITS = rb"\d+(?:_\d+)*"
_FLOAT = rb"\d+(?:_\d+)*(?:\.\d+(?:_\d+)*)?(?:[eE][+-]?\d+)?"

_RATIONAL_RE = re.compile(rb"([+-]?" + _DIGITS + rb")/(" + _DIGITS + rb")r?")
_COMPLEX_RE = re.compile(
    rb"(?P<real>[+-]?" + _FLOAT + rb")(?P<imag>[+-]" + _FLOAT + rb")i"
)
_IMAGINARY_RE = re.compile(rb"(?P<imag>[+-]?" + _FLOAT + rb")i")
_FLOAT_RE = re.compile(
    rb"[+-]?" + _DIGITS + rb"(?:\.\d+(?:_\d+)*(?:[eE][+-]?\d+)?|[eE][+-]?\d+)"
)
_INTEGER_RE = re.compile(rb"[+-]?" + _DIGITS)
_PREFIXED_INTEGER_RE = re.compile(
    rb"[+-]?0(?:[xX][0-9a-fA-F]+(?:_[0-9a-fA-F]+)*|[oO][0-7]+(?:_[0-7]+)*|[bB][01]+(?:_[01]+)*)"
)

_TRUE = frozenset({b"true"})
_FALSE = frozenset({b"false"})
_NIL = frozenset({b"null", b"nil"})

_ESCAPES: dict[int, bytes] = {
    ord("\\"): b"\\",
    ord('"'): b'"',
    ord("'"): b"'",
    ord("/"): b"/",
    ord("n"): b"\n",
    ord("t"): b"\t",
    ord("r"): b"\r",
    ord("0"): b"\0",
    ord("b"): b"\b",
    ord("f"): b"\f",
}

VALID_ESCAPES: frozenset[int] = frozenset(_ESCAPES)


def classify(raw: bytes, span: Span, content: ChunkSlice) -> ScalarValue:
    """Turn the bytes of a bare literal into a typed scalar value."""
    if raw in _TRUE:
        return BoolValue(span=span, content=content, value=True)
    if raw in _FALSE:
        return BoolValue(span=span, content=content, value=False)
    if raw in _NIL:
        return NilValue(span=span, content=content)

    match = _RATIONAL_RE.fullmatch(raw)
    if match:
        denominator = int(match.group(2))
        if denominator != 0:
            return RationalValue(
                span=span,
                content=content,
                numerator=int(match.group(1)),
                denominator=denominator,
            )
        return StringValue(span=span, content=content)

    if raw.endswith(b"i"):
        match = _COMPLEX_RE.fullmatch(raw)
        if match:
            return ComplexValue(
                span=span,
                content=content,
                real=float(match.group("real")),
                imag=float(match.group("imag")),
            )
        match = _IMAGINARY_RE.fullmatch(raw)
        if match:
            return ComplexValue(
                span=span, content=content, real=0.0, imag=float(match.group("imag"))
            )

    if _FLOAT_RE.fullmatch(raw):
        return FloatValue(span=span, content=content, value=float(raw))

    if _INTEGER_RE.fullmatch(raw):
        return IntegerValue(span=span, content=content, value=int(raw, 10))

    if _PREFIXED_INTEGER_RE.fullmatch(raw):
        return IntegerValue(span=span, content=content, value=int(raw, 0))

    return StringValue(span=span, content=content)


def unescape(raw: bytes | memoryview) -> bytes:
    """Apply the quoted-string escape rule to raw content bytes.

    Unknown escapes keep the escaped byte and drop the backslash.
    A trailing lone backslash is kept as-is.
    """
    data = bytes(raw)
    if b"\\" not in data:
        return data

    out = bytearray()
    i = 0
    while i < len(data):
        b = data[i]
        if b == 0x5C and i + 1 < len(data):
            nxt = data[i + 1]
            out += _ESCAPES.get(nxt, bytes((nxt,)))
            i += 2
            continue
        out.append(b)
        i += 1
    return bytes(out)
