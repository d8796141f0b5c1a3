"""Converters for list fields: split on a separator, convert every element."""

from __future__ import annotations

from typing import Any, List, get_args, get_origin

from .converters import BUILTIN_CONVERTERS, Kind, kind_of
from .errors import ConfigError, ConversionError, UnsupportedSequenceTypeError
from .fields import unwrap_optional

DEFAULT_SEPARATOR = ","


def is_sequence_type(hint: Any) -> bool:
    return hint is list or hint is List or get_origin(hint) is list


def element_type(hint: Any) -> Any:
    """Element annotation of ``list[T]``; a bare ``list`` holds strings."""
    args = get_args(hint)
    return args[0] if args else str


def split(raw: str, separator: str | None = None) -> list[str]:
    """Split keeping empty items, so ``"a,,b"`` gives three elements."""
    return raw.split(separator or DEFAULT_SEPARATOR)


def convert_sequence(hint: Any, raw: str, separator: str | None = None) -> list[Any]:
    """Convert *raw* into a list for the ``list[T]`` annotation *hint*.

    The first element that fails to convert fails the whole field; a
    partially converted list is never returned.
    """
    item_type, _ = unwrap_optional(element_type(hint))
    items = split(raw, separator)

    kind = kind_of(item_type)
    if kind is Kind.STRING:
        return items
    if kind is not None:
        converter = BUILTIN_CONVERTERS[kind]
        return [converter(item) for item in items]
    if is_text_decodable(item_type):
        return [decode_text(item_type, item) for item in items]
    raise UnsupportedSequenceTypeError(type_name(item_type))


def is_text_decodable(hint: Any) -> bool:
    return isinstance(hint, type) and callable(getattr(hint, "decode_text", None))


def decode_text(cls: type, raw: str, current: Any = None) -> Any:
    """Decode *raw* into *current* when it is a ``cls`` instance, else into a new ``cls()``."""
    if isinstance(current, cls):
        instance = current
    else:
        try:
            instance = cls()
        except Exception as exc:
            raise ConversionError(f"cannot create {cls.__name__} to decode {raw!r} into: {exc}") from exc
    try:
        instance.decode_text(raw)
    except ConfigError:
        raise
    except Exception as exc:
        raise ConversionError(str(exc) or f"cannot decode {raw!r} as {cls.__name__}") from exc
    return instance


def type_name(hint: Any) -> str:
    if isinstance(hint, str):
        return hint
    if isinstance(hint, type):
        return hint.__name__
    return getattr(hint, "__name__", None) or repr(hint)


__all__ = [
    "DEFAULT_SEPARATOR",
    "convert_sequence",
    "decode_text",
    "element_type",
    "is_sequence_type",
    "is_text_decodable",
    "split",
    "type_name",
]
