"""Core package exports."""

from .converters import Float32, Float64, Int64, Uint, Uint64
from .environment import Environment
from .errors import (
    ConfigError,
    ConversionError,
    CustomParserError,
    NotARecordError,
    NotSetError,
    ParseError,
    RequiredNotSetError,
    UnsupportedOptionError,
    UnsupportedSequenceTypeError,
    UnsupportedTypeError,
)
from .fields import Default, Env, Expand, FieldDescriptor, Separator, describe_fields, env_field
from .loader import parse, parse_with_funcs, parse_with_prefix, parse_with_prefix_funcs
from .registry import ConverterRegistry, CustomParsers

__all__ = [
    "ConfigError",
    "ConversionError",
    "ConverterRegistry",
    "CustomParserError",
    "CustomParsers",
    "Default",
    "Env",
    "Environment",
    "Expand",
    "FieldDescriptor",
    "Float32",
    "Float64",
    "Int64",
    "NotARecordError",
    "NotSetError",
    "ParseError",
    "RequiredNotSetError",
    "Separator",
    "Uint",
    "Uint64",
    "UnsupportedOptionError",
    "UnsupportedSequenceTypeError",
    "UnsupportedTypeError",
    "describe_fields",
    "env_field",
    "parse",
    "parse_with_funcs",
    "parse_with_prefix",
    "parse_with_prefix_funcs",
]
