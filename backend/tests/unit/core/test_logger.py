"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from session_auth.core.logger import JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG


def test_json_formatter_copies_known_extras() -> None:
    record = logging.LogRecord("svc", logging.INFO, __file__, 1, "Issued %s", ("pair",), None)
    record.user_id = "u-1"
    record.password = "never"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Issued pair"
    assert payload["level"] == "INFO"
    assert payload["user_id"] == "u-1"
    assert "password" not in payload
    assert payload["request_id"] is None
