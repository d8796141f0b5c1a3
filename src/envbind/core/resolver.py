"""Resolution of one field's raw string from the environment."""

from __future__ import annotations

from .environment import Environment
from .errors import RequiredNotSetError, UnsupportedOptionError
from .fields import REQUIRED, FieldDescriptor


def resolve(descriptor: FieldDescriptor, prefix: str, environment: Environment) -> str:
    """Return the raw value for *descriptor*, or ``""`` to leave the field alone.

    ``required`` ignores the declared default: the prefixed key has to exist,
    though an empty value is accepted. A required value is returned as looked
    up, without expansion.
    """
    key = descriptor.effective_key(prefix)

    for option in descriptor.options:
        if option not in ("", REQUIRED):
            raise UnsupportedOptionError(option, field=descriptor.name, key=descriptor.key)

    if descriptor.required:
        value, found = environment.lookup(key)
        if not found:
            raise RequiredNotSetError(descriptor.key, field=descriptor.name)
        return value

    value = environment.get_or(key, descriptor.default or "")
    if descriptor.expand:
        value = environment.expand(value)
    return value


__all__ = ["resolve"]
