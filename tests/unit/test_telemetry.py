"""Tests for telemetry module."""

import io
import json
import logging

from pylon_client.telemetry import (
    JsonFormatter,
    LogContext,
    LogLevel,
    PylonLogger,
    SensitiveDataMasker,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    set_log_context,
)


def make_record(msg: str, **extra_fields) -> logging.LogRecord:
    record = logging.LogRecord("pylon_client.test", logging.INFO, __file__, 1, msg, None, None)
    if extra_fields:
        record.extra_fields = extra_fields
    return record


class TestLogContext:
    """Tests for LogContext."""

    def test_empty_context(self) -> None:
        """Test empty context."""
        ctx = LogContext()
        assert ctx.to_dict() == {}

    def test_context_with_fields(self) -> None:
        """Test context with fields."""
        ctx = LogContext(request_id="req-123", deployment_id="1234", namespace="settings")
        assert ctx.to_dict() == {
            "request_id": "req-123",
            "deployment_id": "1234",
            "namespace": "settings",
        }

    def test_context_with_extra(self) -> None:
        """Test context with extra fields."""
        ctx = LogContext(request_id="req-123")
        result = ctx.with_extra(attempt=2).to_dict()
        assert result["request_id"] == "req-123"
        assert result["attempt"] == 2

    def test_set_and_clear(self) -> None:
        """Test the context variable round trip."""
        set_log_context(LogContext(deployment_id="1234", extra={"attempt": 3}))
        try:
            ctx = get_log_context()
            assert ctx.deployment_id == "1234"
            assert ctx.extra == {"attempt": 3}
        finally:
            clear_log_context()
        assert get_log_context().to_dict() == {}


class TestSensitiveDataMasker:
    """Tests for SensitiveDataMasker."""

    def test_mask_bearer_token(self) -> None:
        """Test masking bearer tokens."""
        masked = SensitiveDataMasker().mask("Authorization: Bearer secret-token-123")
        assert "secret-token-123" not in masked
        assert "REDACTED" in masked

    def test_mask_bare_authorization(self) -> None:
        """Test masking a bare token in an Authorization header."""
        masked = SensitiveDataMasker().mask("Authorization: abcdef123456")
        assert "abcdef123456" not in masked

    def test_mask_workbench_token(self) -> None:
        """Test masking tokens embedded in socket URLs."""
        masked = SensitiveDataMasker().mask("wss://workbench.pylon.bot/ws?token=abc123")
        assert "abc123" not in masked
        assert masked.startswith("wss://workbench.pylon.bot/ws?token=")

    def test_mask_env_assignment(self) -> None:
        """Test masking PYLON_TOKEN assignments."""
        masked = SensitiveDataMasker().mask("PYLON_TOKEN=abc123 pylon")
        assert "abc123" not in masked

    def test_mask_dict(self) -> None:
        """Test masking dictionary."""
        data = {
            "token": "secret-token",
            "key": "prefix",
            "nested": {"auth": "secret"},
            "url": "wss://w/ws?token=abc",
        }
        masked = SensitiveDataMasker().mask_dict(data)
        assert masked["token"] == "***REDACTED***"
        assert masked["key"] == "prefix"
        assert masked["nested"]["auth"] == "***REDACTED***"
        assert "abc" not in masked["url"]


class TestFormatters:
    """Tests for the JSON and text formatters."""

    def test_json_formatter(self) -> None:
        """Test that extra fields land at the top level, masked."""
        record = make_record("Console socket opened", deployment_id="1234", token="t")
        data = json.loads(JsonFormatter(include_timestamp=False).format(record))
        assert data == {
            "level": "INFO",
            "logger": "pylon_client.test",
            "message": "Console socket opened",
            "deployment_id": "1234",
            "token": "***REDACTED***",
        }

    def test_json_formatter_context(self) -> None:
        """Test that the active log context is included."""
        set_log_context(LogContext(namespace="settings"))
        try:
            data = json.loads(JsonFormatter().format(make_record("hi")))
        finally:
            clear_log_context()
        assert data["context"] == {"namespace": "settings"}
        assert data["timestamp"].endswith("Z")

    def test_text_formatter(self) -> None:
        """Test key=value suffix and message masking."""
        record = make_record("Authorization: Bearer s3cret", attempt=2)
        text = TextFormatter().format(record)
        assert "s3cret" not in text
        assert text.endswith("attempt=2")
        assert record.msg == "Authorization: Bearer s3cret"


class TestPylonLogger:
    """Tests for PylonLogger."""

    def test_get_logger(self) -> None:
        """Test getting a logger."""
        logger = get_logger("pylon_client.test")
        assert isinstance(logger, PylonLogger)
        assert logger.name == "pylon_client.test"

    def test_configure(self) -> None:
        """Test configuring level, format and output stream."""
        out = io.StringIO()
        PylonLogger.configure(level=LogLevel.DEBUG, format="json", stream=out)
        try:
            logger = get_logger("pylon_client.test.configure")
            logger.debug("Scheduling reconnect", delay=0.25)
            logger.error("Reconnect failed", exc_info=RuntimeError("boom"))
        finally:
            PylonLogger.configure(level=LogLevel.WARNING, format="text")

        lines = [json.loads(line) for line in out.getvalue().splitlines()]
        assert lines[0]["message"] == "Scheduling reconnect"
        assert lines[0]["delay"] == 0.25
        assert lines[1]["level"] == "ERROR"
        assert "RuntimeError: boom" in lines[1]["exception"]
