# pylint: disable=missing-module-docstring,missing-function-docstring

import json
import logging

from core.logging_config import ColoredConsoleFormatter, StructuredFormatter


def make_record(extra_data=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="core.connection_manager",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Transport error for %s",
        args=("10.0.0.5",),
        exc_info=None,
    )
    if extra_data is not None:
        record.extra_data = extra_data
    return record


def test_structured_formatter_emits_json_with_context() -> None:
    line = StructuredFormatter().format(make_record({"address": "10.0.0.5", "error_type": "OSError"}))

    decoded = json.loads(line)
    assert decoded["level"] == "WARNING"
    assert decoded["logger"] == "core.connection_manager"
    assert decoded["message"] == "Transport error for 10.0.0.5"
    assert decoded["address"] == "10.0.0.5"
    assert decoded["error_type"] == "OSError"


def test_console_formatter_appends_context() -> None:
    line = ColoredConsoleFormatter().format(make_record({"generation": 2}))

    assert "Transport error for 10.0.0.5" in line
    assert line.endswith("(generation=2)")
