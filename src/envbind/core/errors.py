"""Error taxonomy for environment-driven record population."""

from __future__ import annotations

from typing import Sequence


class ConfigError(Exception):
    """Raised when configuration parsing or validation fails."""

    def __init__(self, message: str, *, field: str | None = None, key: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.key = key

    def __str__(self) -> str:
        return self.message


class NotARecordError(ConfigError, TypeError):
    """The value handed to an entry point is not a mutable dataclass instance."""

    def __init__(self, received: object = None) -> None:
        kind = type(received).__name__
        super().__init__(f"expected a mutable dataclass instance, received {kind}")


class UnsupportedTypeError(ConfigError):
    def __init__(self, type_name: str = "", *, field: str | None = None, key: str | None = None) -> None:
        message = "type is not supported"
        if type_name:
            message = f"type {type_name} is not supported"
        super().__init__(message, field=field, key=key)


class UnsupportedSequenceTypeError(ConfigError):
    def __init__(self, type_name: str = "", *, field: str | None = None, key: str | None = None) -> None:
        message = "unsupported slice type"
        if type_name:
            message = f"unsupported slice type {type_name}"
        super().__init__(message, field=field, key=key)


class NotSetError(ConfigError):
    """Raised when an environment variable that must exist is absent."""

    def __init__(self, key: str, *, field: str | None = None) -> None:
        super().__init__(f"environment variable {_quote(key)} is not set", field=field, key=key)


class RequiredNotSetError(NotSetError):
    def __init__(self, key: str, *, field: str | None = None) -> None:
        ConfigError.__init__(
            self,
            f"required environment variable {_quote(key)} is not set",
            field=field,
            key=key,
        )


class UnsupportedOptionError(ConfigError):
    def __init__(self, option: str, *, field: str | None = None, key: str | None = None) -> None:
        super().__init__(f"env option {_quote(option)} not supported", field=field, key=key)
        self.option = option


class ConversionError(ConfigError):
    """A raw string could not be converted to the field's type."""


class CustomParserError(ConversionError):
    pass


class ParseError(ConfigError):
    """Aggregate of every field failure collected during one traversal.

    The message is each field message joined by ``". "`` in field
    declaration order; ``errors`` keeps the individual exceptions.
    """

    def __init__(self, errors: Sequence[ConfigError]) -> None:
        self.errors = list(errors)
        super().__init__(". ".join(str(error) for error in self.errors))


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


__all__ = [
    "ConfigError",
    "ConversionError",
    "CustomParserError",
    "NotARecordError",
    "NotSetError",
    "ParseError",
    "RequiredNotSetError",
    "UnsupportedOptionError",
    "UnsupportedSequenceTypeError",
    "UnsupportedTypeError",
]
