from __future__ import annotations

import argparse
import dataclasses
import importlib
import json
import sys
from datetime import timedelta
from typing import Any, Sequence, TextIO
from urllib.parse import ParseResult

import structlog
import yaml

from envbind.cli.settings import load_settings
from envbind.core.environment import default_environment
from envbind.core.errors import ConfigError, ParseError
from envbind.core.fields import describe_fields, unwrap_optional
from envbind.core.loader import parse_with_prefix
from envbind.core.logging_setup import configure_logging
from envbind.core.sequences import type_name
from envbind.core.version import get_version_info

logger = structlog.get_logger("envbind.cli")


class TargetError(Exception):
    """The ``module:Class`` argument could not be turned into a record."""


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    info = get_version_info()
    parser = argparse.ArgumentParser(
        prog="envbind",
        description="Populate a dataclass from environment variables and report the result.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {info['envbind']} (structlog {info['structlog']}, python-dotenv {info['python-dotenv']})",
    )
    parser.add_argument(
        "--env-file",
        help="Load variables from this .env file before parsing (defaults to $ENVBIND_ENV_FILE).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Parse the environment into a record and print it.")
    check.add_argument("target", help="Record class as module:Class.")
    check.add_argument("-p", "--prefix", default="", help="Prefix prepended to every environment key.")
    check.add_argument("-f", "--format", choices=("json", "yaml"), default="json", help="Output format.")

    describe = subparsers.add_parser("describe", help="List the environment keys a record reads.")
    describe.add_argument("target", help="Record class as module:Class.")
    describe.add_argument("-p", "--prefix", default="", help="Prefix prepended to every environment key.")

    return parser.parse_args(argv)


def _load_record(target: str) -> Any:
    module_name, _, attr_path = target.partition(":")
    if not module_name or not attr_path:
        raise TargetError(f"target must look like module:Class, got {target!r}")
    try:
        obj: Any = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            obj = getattr(obj, attr)
    except (ImportError, AttributeError) as exc:
        raise TargetError(f"cannot import {target}: {exc}") from exc

    if not (isinstance(obj, type) and dataclasses.is_dataclass(obj)):
        raise TargetError(f"{target} is not a dataclass")
    try:
        return obj()
    except Exception as exc:
        raise TargetError(f"cannot create {target}: {exc}") from exc


def _to_plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    if isinstance(value, ParseResult):
        return value.geturl()
    if isinstance(value, timedelta):
        return str(value)
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _check(args: argparse.Namespace, out: TextIO) -> int:
    record = _load_record(args.target)
    parse_with_prefix(
        record,
        args.prefix,
        on_set=lambda descriptor, _raw: logger.debug(
            "field-set", field=descriptor.name, key=descriptor.effective_key(args.prefix)
        ),
    )
    data = _to_plain(record)
    if args.format == "yaml":
        out.write(yaml.safe_dump(data, sort_keys=False))
    else:
        out.write(json.dumps(data, indent=2, default=str) + "\n")
    return 0


def _describe(args: argparse.Namespace, out: TextIO) -> int:
    record = _load_record(args.target)
    rows = [("FIELD", "KEY", "TYPE", "OPTIONS", "DEFAULT", "EXPAND", "SEPARATOR")]
    _collect_rows(record, args.prefix, "", rows)
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        out.write("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip() + "\n")
    return 0


def _collect_rows(record: Any, prefix: str, path: str, rows: list[tuple[str, ...]]) -> None:
    for descriptor in describe_fields(record):
        name = f"{path}{descriptor.name}"
        nested = getattr(record, descriptor.name, None)
        if dataclasses.is_dataclass(nested) and not isinstance(nested, type):
            _collect_rows(nested, prefix, f"{name}.", rows)
            continue
        inner, optional = unwrap_optional(descriptor.type)
        rows.append(
            (
                name,
                descriptor.effective_key(prefix) if descriptor.key else "-",
                type_name(inner) + ("?" if optional else ""),
                ",".join(o for o in descriptor.options if o) or "-",
                "-" if descriptor.default is None else repr(descriptor.default),
                "yes" if descriptor.expand else "no",
                descriptor.separator or ",",
            )
        )


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        # ENVBIND_* settings in --env-file have to be visible to load_settings().
        env_file = args.env_file
        loaded = 0
        if env_file:
            loaded = default_environment().load_dotenv(env_file)
        settings = load_settings()
        if not env_file and settings.env_file:
            env_file = settings.env_file
            loaded = default_environment().load_dotenv(env_file)
        configure_logging(settings.log_level, settings.log_format)
        if env_file:
            logger.info("env-file-loaded", path=env_file, variables=loaded)

        if args.command == "describe":
            return _describe(args, sys.stdout)
        return _check(args, sys.stdout)
    except ParseError as exc:
        for error in exc.errors:
            print(error, file=sys.stderr)
        return 1
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1
    except FileNotFoundError as exc:
        print(f"file not found: {exc}", file=sys.stderr)
        return 1
    except TargetError as exc:
        print(exc, file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


__all__ = ["main"]


if __name__ == "__main__":
    sys.exit(main())
