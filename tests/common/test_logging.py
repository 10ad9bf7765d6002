"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging

import pytest

from styleguard_common.logging import (
    CorrelationContext,
    JsonFormatter,
    get_correlation_id,
    get_logger,
    setup_logging,
    with_fields,
)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("styleguard.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_structured_fields() -> None:
    """Known and custom extra fields are rendered as JSON members."""
    payload = json.loads(
        JsonFormatter().format(_record(operation="doctor", status="success", path="/repo", _private=1))
    )

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["operation"] == "doctor"
    assert payload["path"] == "/repo"
    assert "_private" not in payload
    assert payload["ts"].endswith("Z")


def test_json_formatter_reads_correlation_context() -> None:
    """Records without a correlation id pick up the active context."""
    with CorrelationContext("run-1"):
        payload = json.loads(JsonFormatter().format(_record()))

    assert payload["correlation_id"] == "run-1"


def test_correlation_context_restores_previous_value() -> None:
    """Nested contexts unwind to the outer id."""
    with CorrelationContext("outer"):
        with CorrelationContext("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == "outer"
    assert get_correlation_id() is None


def test_adapter_adds_operation_and_status(caplog: pytest.LogCaptureFixture) -> None:
    """Every record carries operation, status and the correlation id."""
    logger = get_logger("styleguard.test.adapter")

    with caplog.at_level(logging.INFO, logger="styleguard.test.adapter"), CorrelationContext("abc"):
        logger.warning("careful")
        logger.info("done", extra={"operation": "check-config"})

    warning, info = caplog.records[-2:]
    assert (getattr(warning, "operation", None), getattr(warning, "status", None)) == ("unknown", "warning")
    assert (getattr(info, "operation", None), getattr(info, "status", None)) == ("check-config", "success")
    assert getattr(info, "correlation_id", None) == "abc"


def test_with_fields_binds_context(caplog: pytest.LogCaptureFixture) -> None:
    """Bound fields are merged into each record; call-site extras win."""
    logger = get_logger("styleguard.test.fields")

    with caplog.at_level(logging.INFO, logger="styleguard.test.fields"):
        with with_fields(logger, operation="doctor", root="/repo") as log:
            log.info("checking")
        with_fields(logger, operation="doctor").info("override", extra={"operation": "all"})

    first, second = caplog.records[-2:]
    assert getattr(first, "operation", None) == "doctor"
    assert getattr(first, "root", None) == "/repo"
    assert getattr(second, "operation", None) == "all"


def test_setup_logging_writes_json_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    """The CLI configuration keeps stdout free for envelopes."""
    setup_logging(logging.INFO, json_output=True)

    get_logger("styleguard.test.setup").info("ready", extra={"operation": "setup"})

    captured = capsys.readouterr()
    assert captured.out == ""
    line = json.loads(captured.err.strip().splitlines()[-1])
    assert line["message"] == "ready"
    assert line["operation"] == "setup"
