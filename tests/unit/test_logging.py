from __future__ import annotations

import json
import logging

from dualstore.utils.logging import _json_formatter, configure_logging

EXPECTED_INSERTED = 5
EXPECTED_ATTEMPTED = 7


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
    record.inserted = EXPECTED_INSERTED
    record.kind = "users"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["inserted"] == EXPECTED_INSERTED
    assert payload["kind"] == "users"
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"attempted": EXPECTED_ATTEMPTED}

    payload = json.loads(_json_formatter(record))

    assert payload["attempted"] == EXPECTED_ATTEMPTED


def test_configure_logging_quiets_driver_loggers() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging(level="INFO")

        assert root.level == logging.INFO
        assert logging.getLogger("pymongo").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_configure_logging_without_force_keeps_existing_handlers() -> None:
    root = logging.getLogger()
    sentinel = logging.NullHandler()
    saved_handlers = root.handlers[:]
    root.handlers[:] = [sentinel]
    try:
        configure_logging(level="DEBUG", force=False)

        assert root.handlers == [sentinel]
    finally:
        root.handlers[:] = saved_handlers
