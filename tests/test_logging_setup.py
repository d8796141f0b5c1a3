import io
import json
import logging

import structlog

from envbind.core.logging_setup import configure_logging


def test_json_output_includes_stdlib_records(reset_structlog):
    stream = io.StringIO()
    configure_logging("debug", "json", stream=stream)

    logging.getLogger("envbind.core").debug("descending into %s", "Settings")

    entry = json.loads(stream.getvalue().splitlines()[-1])
    assert entry["event"] == "descending into Settings"
    assert entry["level"] == "debug"
    assert entry["logger"] == "envbind.core"
    assert "timestamp" in entry


def test_structlog_events_use_same_handler(reset_structlog):
    stream = io.StringIO()
    configure_logging("info", "json", stream=stream)

    structlog.get_logger("envbind.cli").info("env-file-loaded", variables=3)

    entry = json.loads(stream.getvalue().splitlines()[-1])
    assert entry["event"] == "env-file-loaded"
    assert entry["variables"] == 3


def test_level_filters_output(reset_structlog):
    stream = io.StringIO()
    configure_logging("warning", "console", stream=stream)

    logging.getLogger("envbind.core").info("hidden")
    logging.getLogger("envbind.core").warning("shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "shown" in output


def test_reconfiguring_replaces_handler(reset_structlog):
    configure_logging("info", "console", stream=io.StringIO())
    configure_logging("info", "console", stream=io.StringIO())
    assert len(logging.getLogger("envbind").handlers) == 1
