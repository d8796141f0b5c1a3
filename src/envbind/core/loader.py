"""Populate dataclass records from environment variables.

Fields are visited in declaration order. Resolution and conversion failures
are collected and raised together as one ``ParseError`` once every field has
been attempted. Two things stop the walk early: a top-level argument that is
not a mutable dataclass instance, and any failure inside a nested record.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, MutableMapping

from .environment import Environment, default_environment
from .errors import ConfigError, NotARecordError, ParseError
from .fields import FieldDescriptor, describe_fields, is_mutable_record
from .registry import ConverterRegistry, CustomParsers
from .resolver import resolve

logger = logging.getLogger("envbind.core")

OnSet = Callable[[FieldDescriptor, str], Any]


def parse(
    record: Any,
    *,
    on_set: OnSet | None = None,
    env: Environment | MutableMapping[str, str] | None = None,
) -> None:
    """Load the environment into the fields of *record*."""
    parse_with_prefix_funcs(record, "", None, on_set=on_set, env=env)


def parse_with_prefix(
    record: Any,
    prefix: str,
    *,
    on_set: OnSet | None = None,
    env: Environment | MutableMapping[str, str] | None = None,
) -> None:
    """Like :func:`parse`, looking up ``prefix + key`` for every field."""
    parse_with_prefix_funcs(record, prefix, None, on_set=on_set, env=env)


def parse_with_funcs(
    record: Any,
    parsers: CustomParsers | None,
    *,
    on_set: OnSet | None = None,
    env: Environment | MutableMapping[str, str] | None = None,
) -> None:
    """Like :func:`parse`, with caller parsers taking precedence for their types."""
    parse_with_prefix_funcs(record, "", parsers, on_set=on_set, env=env)


def parse_with_prefix_funcs(
    record: Any,
    prefix: str,
    parsers: CustomParsers | None,
    *,
    on_set: OnSet | None = None,
    env: Environment | MutableMapping[str, str] | None = None,
) -> None:
    """Populate *record* in place.

    Args:
        record: mutable dataclass instance to populate
        prefix: prepended to every declared key, nested records included
        parsers: mapping of annotation -> ``Callable[[str], Any]``; shadows
            the built-in converter for that annotation during this call only
        on_set: called as ``on_set(descriptor, raw)`` after each field is set
        env: environment accessor or mapping; ``os.environ`` when omitted

    Raises:
        NotARecordError: *record* is not a mutable dataclass instance
        ParseError: one or more fields could not be populated
    """
    if not is_mutable_record(record):
        raise NotARecordError(record)

    registry = ConverterRegistry(parsers)
    _populate(record, prefix or "", registry, _as_environment(env), on_set)


def _populate(
    record: Any,
    prefix: str,
    registry: ConverterRegistry,
    environment: Environment,
    on_set: OnSet | None,
) -> None:
    errors: list[ConfigError] = []
    populated = 0

    for descriptor in describe_fields(record):
        current = getattr(record, descriptor.name, None)

        if is_mutable_record(current):
            logger.debug("descending into %s.%s", type(record).__name__, descriptor.name)
            _populate(current, prefix, registry, environment, on_set)
            continue
        if current is None and descriptor.is_record:
            continue

        try:
            raw = resolve(descriptor, prefix, environment)
        except ConfigError as exc:
            errors.append(_with_field(exc, descriptor))
            continue
        if raw == "":
            continue

        try:
            value = registry.convert(
                descriptor.type,
                raw,
                separator=descriptor.separator,
                current=current,
            )
        except ConfigError as exc:
            errors.append(_with_field(exc, descriptor))
            continue

        setattr(record, descriptor.name, value)
        populated += 1
        logger.debug("set %s from %s", descriptor.name, descriptor.effective_key(prefix))
        _notify(on_set, descriptor, raw)

    if errors:
        logger.debug(
            "%s: %d field(s) populated, %d failed",
            type(record).__name__,
            populated,
            len(errors),
        )
        raise ParseError(errors)


def _notify(on_set: OnSet | None, descriptor: FieldDescriptor, raw: str) -> None:
    if on_set is None:
        return
    try:
        on_set(descriptor, raw)
    except Exception as exc:
        logger.warning("on_set callback failed for %s: %s", descriptor.name, exc)


def _with_field(error: ConfigError, descriptor: FieldDescriptor) -> ConfigError:
    if error.field is None:
        error.field = descriptor.name
    if error.key is None:
        error.key = descriptor.key
    return error


def _as_environment(env: Environment | MutableMapping[str, str] | None) -> Environment:
    if env is None:
        return default_environment()
    if isinstance(env, Environment):
        return env
    return Environment(env)


__all__ = [
    "OnSet",
    "parse",
    "parse_with_funcs",
    "parse_with_prefix",
    "parse_with_prefix_funcs",
]
