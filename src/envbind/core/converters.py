"""Built-in string converters for scalar field types."""

from __future__ import annotations

import math
import re
import struct
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, NewType
from urllib.parse import ParseResult, urlparse

from .errors import ConversionError

Converter = Callable[[str], Any]

# Width/signedness markers for annotations. Plain ``int`` is a 32-bit signed
# integer and plain ``float`` a 64-bit float.
Int64 = NewType("Int64", int)
Uint = NewType("Uint", int)
Uint64 = NewType("Uint64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)


class Kind(Enum):
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    INT64 = "int64"
    UINT = "uint"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DURATION = "duration"
    URL = "url"


_KIND_BY_TYPE: dict[Any, Kind] = {
    str: Kind.STRING,
    bool: Kind.BOOL,
    int: Kind.INT,
    Int64: Kind.INT64,
    Uint: Kind.UINT,
    Uint64: Kind.UINT64,
    Float32: Kind.FLOAT32,
    float: Kind.FLOAT64,
    Float64: Kind.FLOAT64,
    timedelta: Kind.DURATION,
    ParseResult: Kind.URL,
}

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_SIGNED_PATTERN = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_PATTERN = re.compile(r"[0-9]+")
_DECIMAL_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_FLOAT_PATTERN = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")
_SPECIAL_FLOAT_PATTERN = re.compile(r"(?i:[+-]?inf(?:inity)?|nan)")

_DURATION_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_DURATION_UNITS: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_MAX_DURATION_NS = (1 << 63) - 1

_MAX_INTEGER_DIGITS = 20

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def kind_of(hint: Any) -> Kind | None:
    try:
        return _KIND_BY_TYPE.get(hint)
    except TypeError:  # unhashable annotation
        return None


def parse_string(raw: str) -> str:
    return raw


def parse_bool(raw: str) -> bool:
    if raw in _TRUE_LITERALS:
        return True
    if raw in _FALSE_LITERALS:
        return False
    raise ConversionError(f'cannot parse "{raw}" as bool: invalid syntax')


def parse_int(raw: str, bits: int = 32) -> int:
    if not _SIGNED_PATTERN.fullmatch(raw):
        raise ConversionError(f'cannot parse "{raw}" as int{bits}: invalid syntax')
    if _too_many_digits(raw):
        raise ConversionError(f'cannot parse "{raw}" as int{bits}: value out of range')
    value = int(raw)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ConversionError(f'cannot parse "{raw}" as int{bits}: value out of range')
    return value


def parse_uint(raw: str, bits: int = 32) -> int:
    if not _UNSIGNED_PATTERN.fullmatch(raw):
        raise ConversionError(f'cannot parse "{raw}" as uint{bits}: invalid syntax')
    if _too_many_digits(raw):
        raise ConversionError(f'cannot parse "{raw}" as uint{bits}: value out of range')
    value = int(raw)
    if value >= 1 << bits:
        raise ConversionError(f'cannot parse "{raw}" as uint{bits}: value out of range')
    return value


def _too_many_digits(raw: str) -> bool:
    # Longer than any 64-bit value; also keeps int() under the interpreter's digit limit.
    return len(raw.lstrip("+-").lstrip("0")) > _MAX_INTEGER_DIGITS


def parse_float(raw: str, bits: int = 64) -> float:
    if _SPECIAL_FLOAT_PATTERN.fullmatch(raw):
        return float(raw)
    if _DECIMAL_FLOAT_PATTERN.fullmatch(raw):
        value = float(raw)
    elif _HEX_FLOAT_PATTERN.fullmatch(raw):
        try:
            value = float.fromhex(raw)
        except OverflowError:
            value = math.inf
    else:
        raise ConversionError(f'cannot parse "{raw}" as float{bits}: invalid syntax')

    if math.isinf(value):
        raise ConversionError(f'cannot parse "{raw}" as float{bits}: value out of range')
    if bits == 32:
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as exc:
            raise ConversionError(f'cannot parse "{raw}" as float32: value out of range') from exc
        if math.isinf(value):
            raise ConversionError(f'cannot parse "{raw}" as float32: value out of range')
    return value


def parse_duration(raw: str) -> timedelta:
    """Parse a duration such as ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and ``h``.
    Resolution is truncated to whole microseconds.
    """
    text = raw
    negative = False
    if text[:1] in ("-", "+"):
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ConversionError(f'invalid duration "{raw}"')

    total = Decimal(0)
    pos = 0
    while pos < len(text):
        match = _DURATION_COMPONENT.match(text, pos)
        whole, fraction, unit = match.groups()
        if not whole and not fraction:
            raise ConversionError(f'invalid duration "{raw}"')
        if not unit:
            raise ConversionError(f'missing unit in duration "{raw}"')
        if unit not in _DURATION_UNITS:
            raise ConversionError(f'unknown unit "{unit}" in duration "{raw}"')
        number = Decimal(whole or "0")
        if fraction:
            number += Decimal(f"0.{fraction}")
        total += number * _DURATION_UNITS[unit]
        pos = match.end()

    nanoseconds = int(total)
    if nanoseconds > _MAX_DURATION_NS + (1 if negative else 0):
        raise ConversionError(f'invalid duration "{raw}"')
    microseconds = nanoseconds // 1000
    return timedelta(microseconds=-microseconds if negative else microseconds)


def parse_url(raw: str) -> ParseResult:
    """Parse an absolute or relative URL reference."""
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw):
        raise ConversionError(f'unable to parse URL "{raw}": invalid control character in URL')
    if raw.startswith(":"):
        raise ConversionError(f'unable to parse URL "{raw}": missing protocol scheme')
    try:
        parsed = urlparse(raw)
        parsed.port  # noqa: B018 - validates the port
    except ValueError as exc:
        raise ConversionError(f'unable to parse URL "{raw}": {exc}') from exc

    if not parsed.scheme and not raw.startswith("/"):
        first_segment = re.split(r"[/?#]", raw, maxsplit=1)[0]
        if ":" in first_segment:
            raise ConversionError(
                f'unable to parse URL "{raw}": first path segment in URL cannot contain colon'
            )
    for component in (parsed.netloc, parsed.path, parsed.fragment):
        bad = _BAD_ESCAPE.search(component)
        if bad:
            escape = component[bad.start():bad.start() + 3]
            raise ConversionError(f'unable to parse URL "{raw}": invalid URL escape "{escape}"')
    return parsed


BUILTIN_CONVERTERS: dict[Kind, Converter] = {
    Kind.STRING: parse_string,
    Kind.BOOL: parse_bool,
    Kind.INT: lambda raw: parse_int(raw, 32),
    Kind.INT64: lambda raw: parse_int(raw, 64),
    Kind.UINT: lambda raw: parse_uint(raw, 32),
    Kind.UINT64: lambda raw: parse_uint(raw, 64),
    Kind.FLOAT32: lambda raw: parse_float(raw, 32),
    Kind.FLOAT64: lambda raw: parse_float(raw, 64),
    Kind.DURATION: parse_duration,
    Kind.URL: parse_url,
}


__all__ = [
    "BUILTIN_CONVERTERS",
    "Converter",
    "Float32",
    "Float64",
    "Int64",
    "Kind",
    "Uint",
    "Uint64",
    "kind_of",
    "parse_bool",
    "parse_duration",
    "parse_float",
    "parse_int",
    "parse_uint",
    "parse_url",
]
