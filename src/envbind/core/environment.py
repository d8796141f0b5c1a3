"""Access to the live process environment.

Every call reads or writes the underlying mapping directly; nothing is cached,
so values set after import are always visible.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import MutableMapping, NoReturn

from dotenv import dotenv_values

from .errors import NotSetError

logger = logging.getLogger("envbind.core")

# $NAME, ${NAME}, single-character shell specials ($1, $?, ${#}) and the two
# malformed brace forms "${}" and an unterminated "${", which are dropped.
_EXPANSION_PATTERN = re.compile(
    r"\$(?:\{(?P<braced>[^}]*)\}|(?P<open>\{)|(?P<special>[*#$@!?\-0-9])|(?P<name>[A-Za-z0-9_]+))"
)


class Environment:
    """Thin accessor over an environment mapping (``os.environ`` by default)."""

    def __init__(self, environ: MutableMapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    @property
    def environ(self) -> MutableMapping[str, str]:
        return self._environ

    def lookup(self, key: str) -> tuple[str, bool]:
        """Return ``(value, found)``; an empty value still counts as found."""
        if key in self._environ:
            return self._environ[key], True
        return "", False

    def get(self, key: str) -> str | None:
        return self._environ.get(key)

    def get_or(self, key: str, default: str) -> str:
        value, found = self.lookup(key)
        return value if found else default

    def get_required(self, key: str) -> str:
        value, found = self.lookup(key)
        if not found:
            raise NotSetError(key)
        return value

    def must_get(self, key: str) -> str:
        """Return the value of *key* or terminate the process.

        Meant for startup code where a missing variable leaves nothing sensible
        to do. ``SystemExit`` is raised rather than a ``ConfigError`` so that
        ordinary ``except Exception`` blocks do not absorb it.
        """
        value, found = self.lookup(key)
        if not found:
            _fatal(key)
        return value

    def set(self, key: str, value: str) -> None:
        self._environ[key] = value

    def unset(self, key: str) -> None:
        self._environ.pop(key, None)

    def expand(self, value: str) -> str:
        """Replace ``${VAR}`` and ``$VAR`` references with their current values.

        Unset variables expand to an empty string. A ``$`` that does not start
        a reference is kept as-is.
        """

        def replace(match: re.Match[str]) -> str:
            if match.group("open") is not None:
                return ""
            name = match.group("braced")
            if name is None:
                name = match.group("special") or match.group("name")
            if not name:
                return ""
            return self._environ.get(name, "")

        return _EXPANSION_PATTERN.sub(replace, value)

    def load_dotenv(self, path: Path | str, *, override: bool = False) -> int:
        """Copy variables from a ``.env`` file into the mapping.

        Existing variables win unless *override* is set. Returns the number of
        variables written.
        """
        dotenv_path = Path(path)
        if not dotenv_path.is_file():
            raise FileNotFoundError(dotenv_path)

        written = 0
        for key, value in dotenv_values(dotenv_path).items():
            if value is None:
                continue
            if not override and key in self._environ:
                continue
            self._environ[key] = value
            written += 1
        logger.debug("loaded %d variable(s) from %s", written, dotenv_path)
        return written


def _fatal(key: str) -> NoReturn:
    message = f'expected environment variable "{key}" does not exist'
    logger.critical("required environment variable %s is missing", key)
    raise SystemExit(message)


_default = Environment()


def default_environment() -> Environment:
    return _default


def get(key: str) -> str | None:
    """Get an environment variable, ``None`` when it does not exist."""
    return _default.get(key)


def get_or(key: str, default: str) -> str:
    """Get an environment variable or *default* when it does not exist."""
    return _default.get_or(key, default)


def get_required(key: str) -> str:
    return _default.get_required(key)


def must_get(key: str) -> str:
    return _default.must_get(key)


def set(key: str, value: str) -> None:  # noqa: A001 - mirrors the accessor name
    _default.set(key, value)


def unset(key: str) -> None:
    _default.unset(key)


def expand(value: str) -> str:
    return _default.expand(value)


__all__ = [
    "Environment",
    "default_environment",
    "expand",
    "get",
    "get_or",
    "get_required",
    "must_get",
    "set",
    "unset",
]
