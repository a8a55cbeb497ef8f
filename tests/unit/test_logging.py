from __future__ import annotations

import json
import logging

from fixplesk.utils.logging import _json_formatter, configure_logging

EXPECTED_OWNER_CHANGES = 12


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.owner_changes = EXPECTED_OWNER_CHANGES
    record.domain = "example.com"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["owner_changes"] == EXPECTED_OWNER_CHANGES
    assert payload["domain"] == "example.com"
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"failures": 2}

    payload = json.loads(_json_formatter(record))

    assert payload["failures"] == 2
    assert "extra" not in payload


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="debug")
    assert logging.getLogger().level == logging.DEBUG

    configure_logging(level="WARNING", json_logs=True)
    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert root.handlers[0].formatter.__class__.__name__ == "JsonFormatter"
