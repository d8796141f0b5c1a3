"""
Field annotations and the per-field descriptor table.

A record is a dataclass. Each field states where its value comes from either
through ``env_field(...)`` or through ``Annotated[...]`` tags:

    @dataclass
    class Settings:
        port: int = env_field("PORT", default="8080", initial=0)
        hosts: Annotated[list[str], Env("HOSTS"), Separator(";")] = field(default_factory=list)

Descriptors are rebuilt on every parse; nothing is cached on the class.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import sys
import types
from typing import Annotated, Any, Callable, Iterable, Union, get_args, get_origin, get_type_hints

logger = logging.getLogger("envbind.core")

REQUIRED = "required"

_METADATA_KEYS = ("env", "env_default", "env_expand", "env_separator")


class Env:
    """Environment key, optionally followed by comma-separated options (``"KEY,required"``)."""

    def __init__(self, key: str):
        self.key = key

    def __repr__(self) -> str:
        return f"Env({self.key!r})"


class Default:
    """Literal used when the variable is not set. Converted like any raw value."""

    def __init__(self, value: object):
        self.value = value if isinstance(value, str) else str(value)

    def __repr__(self) -> str:
        return f"Default({self.value!r})"


class Expand:
    """Expand ``$VAR`` / ``${VAR}`` references inside the resolved value."""

    def __init__(self, enabled: bool | str = True):
        if isinstance(enabled, str):
            enabled = enabled.strip().lower() == "true"
        self.enabled = bool(enabled)

    def __repr__(self) -> str:
        return f"Expand({self.enabled!r})"


class Separator:
    """Delimiter for list fields (``","`` when absent)."""

    def __init__(self, value: str):
        self.value = value

    def __repr__(self) -> str:
        return f"Separator({self.value!r})"


def env_field(
    key: str = "",
    *,
    default: object = None,
    expand: bool | str = False,
    separator: str | None = None,
    initial: Any = None,
    initial_factory: Callable[[], Any] | None = None,
    **field_kwargs: Any,
) -> Any:
    """Declare a dataclass field populated from the environment.

    ``default`` is the environment default literal; ``initial`` /
    ``initial_factory`` give the attribute's value before any parse, which is
    what the field keeps when neither the variable nor a default is present.
    """
    metadata: dict[str, Any] = dict(field_kwargs.pop("metadata", None) or {})
    metadata["env"] = Env(key)
    if default is not None:
        metadata["env_default"] = Default(default)
    if expand:
        metadata["env_expand"] = Expand(expand)
    if separator is not None:
        metadata["env_separator"] = Separator(separator)

    if initial_factory is not None:
        return dataclasses.field(default_factory=initial_factory, metadata=metadata, **field_kwargs)
    return dataclasses.field(default=initial, metadata=metadata, **field_kwargs)


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type: Any
    key: str = ""
    options: tuple[str, ...] = ()
    default: str | None = None
    expand: bool = False
    separator: str | None = None

    @property
    def required(self) -> bool:
        return REQUIRED in self.options

    @property
    def is_record(self) -> bool:
        inner, _ = unwrap_optional(self.type)
        return is_record_type(inner)

    def effective_key(self, prefix: str = "") -> str:
        return f"{prefix}{self.key}"


def split_key(tag: str) -> tuple[str, tuple[str, ...]]:
    """Split ``"KEY,opt1,opt2"`` into the key and its option tokens."""
    parts = tag.split(",")
    return parts[0], tuple(parts[1:])


def describe_fields(record: Any) -> list[FieldDescriptor]:
    """Build descriptors for every field of a dataclass (instance or class), in declaration order."""
    cls = record if isinstance(record, type) else type(record)
    hints = _type_hints(cls)

    descriptors: list[FieldDescriptor] = []
    for f in dataclasses.fields(cls):
        hint = hints.get(f.name, f.type)
        tags: list[Any] = [f.metadata[k] for k in _METADATA_KEYS if k in f.metadata]
        if get_origin(hint) is Annotated:
            args = get_args(hint)
            hint = args[0]
            tags.extend(args[1:])
        descriptors.append(_build_descriptor(f.name, hint, tags))
    return descriptors


def _build_descriptor(name: str, hint: Any, tags: Iterable[Any]) -> FieldDescriptor:
    key, options = "", ()
    default = None
    expand = False
    separator = None
    for tag in tags:
        if isinstance(tag, Env):
            key, options = split_key(tag.key)
        elif isinstance(tag, Default):
            default = tag.value
        elif isinstance(tag, Expand):
            expand = tag.enabled
        elif isinstance(tag, Separator):
            separator = tag.value
    return FieldDescriptor(
        name=name,
        type=hint,
        key=key,
        options=options,
        default=default,
        expand=expand,
        separator=separator,
    )


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        return _type_hints_per_field(cls)


class _AnnotationHolder:
    def __init__(self, annotation: Any) -> None:
        self.__annotations__ = {"value": annotation}


def _type_hints_per_field(cls: type) -> dict[str, Any]:
    """Resolve each annotation on its own so one bad forward reference spoils only its field.

    Fields left out of the result keep their raw string annotation, which no
    converter accepts.
    """
    hints: dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        module = sys.modules.get(base.__module__)
        globalns = dict(getattr(module, "__dict__", {}))
        localns = dict(vars(base))
        for name, annotation in inspect.get_annotations(base).items():
            try:
                hints[name] = get_type_hints(
                    _AnnotationHolder(annotation), globalns, localns, include_extras=True
                )["value"]
            except (NameError, TypeError, SyntaxError) as exc:
                logger.warning("cannot resolve annotation of %s.%s: %s", cls.__name__, name, exc)
                hints.pop(name, None)
    return hints


def unwrap_optional(hint: Any) -> tuple[Any, bool]:
    """Return ``(T, True)`` for ``Optional[T]`` / ``T | None``, else ``(hint, False)``."""
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1 and len(args) < len(get_args(hint)):
            return args[0], True
    return hint, False


def is_record_type(hint: Any) -> bool:
    return isinstance(hint, type) and dataclasses.is_dataclass(hint)


def is_mutable_record(value: Any) -> bool:
    """True for a dataclass *instance* whose fields may be assigned."""
    if isinstance(value, type) or not dataclasses.is_dataclass(value):
        return False
    return not value.__dataclass_params__.frozen


__all__ = [
    "Default",
    "Env",
    "Expand",
    "FieldDescriptor",
    "REQUIRED",
    "Separator",
    "describe_fields",
    "env_field",
    "is_mutable_record",
    "is_record_type",
    "split_key",
    "unwrap_optional",
]
