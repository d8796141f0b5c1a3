"""Type-keyed conversion registry.

Caller-supplied parsers are consulted first and only for the exact
annotation they were registered under (or the inner type of an
``Optional``). Built-ins follow: scalars, lists, then any class exposing
``decode_text``.
"""

from __future__ import annotations

from typing import Any, Mapping

from .converters import BUILTIN_CONVERTERS, Converter, kind_of
from .errors import CustomParserError, UnsupportedTypeError
from .fields import unwrap_optional
from .sequences import convert_sequence, decode_text, is_sequence_type, is_text_decodable, type_name

CustomParsers = Mapping[Any, Converter]


class ConverterRegistry:
    def __init__(self, custom: CustomParsers | None = None) -> None:
        self._custom: dict[Any, Converter] = dict(custom or {})

    def custom_parser(self, hint: Any) -> Converter | None:
        inner, optional = unwrap_optional(hint)
        parser = _lookup(self._custom, hint)
        if parser is None and optional:
            parser = _lookup(self._custom, inner)
        return parser

    def convert(self, hint: Any, raw: str, *, separator: str | None = None, current: Any = None) -> Any:
        """Convert *raw* to a value for annotation *hint*.

        *current* is the field's present value; text-decodable types decode
        into it in place when it already holds an instance.
        """
        parser = self.custom_parser(hint)
        if parser is not None:
            try:
                return parser(raw)
            except Exception as exc:
                raise CustomParserError(f"custom parser error: {exc}") from exc

        inner, _ = unwrap_optional(hint)
        kind = kind_of(inner)
        if kind is not None:
            return BUILTIN_CONVERTERS[kind](raw)
        if is_sequence_type(inner):
            return convert_sequence(inner, raw, separator)
        if is_text_decodable(inner):
            return decode_text(inner, raw, current)
        raise UnsupportedTypeError(type_name(inner))


def _lookup(table: Mapping[Any, Converter], hint: Any) -> Converter | None:
    try:
        return table.get(hint)
    except TypeError:  # unhashable annotation
        return None


__all__ = ["ConverterRegistry", "CustomParsers"]
