"""Tests for logging configuration helpers."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

from pathbox.bootstrap.logging_setup import CorrelationIdFilter, configure_logging


def test_configure_logging_stream_handler():
    """Configure stdout handler and validate formatter output."""
    logger = configure_logging("DEBUG", "stdout")

    assert logger.logger.name == "pathbox"
    assert logger.logger.level == logging.DEBUG
    assert len(logger.logger.handlers) == 1

    handler = logger.logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    formatter = handler.formatter
    assert formatter is not None
    record = logging.LogRecord(
        name="pathbox.validator",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=0,
        msg="format test",
        args=(),
        exc_info=None,
    )
    record.correlation_id = "test-id-123"
    record.component = "validator"
    log_data = json.loads(formatter.format(record))
    assert log_data["component"] == "validator"
    assert log_data["message"] == "format test"
    assert log_data["correlation_id"] == "test-id-123"


def test_configure_logging_text_format():
    """Text output carries the correlation ID placeholder."""
    logger = configure_logging("INFO", "stdout", use_json=False)
    handler = logger.logger.handlers[0]
    record = logging.LogRecord(
        name="pathbox.registry",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="plain",
        args=(),
        exc_info=None,
    )
    assert handler.filter(record)
    formatted = handler.format(record)
    assert "[-] pathbox.registry :: plain" in formatted


def test_configure_logging_file_destination(tmp_path: Path):
    """Configure file handler and verify writes are persisted."""
    destination = tmp_path / "logs" / "pathbox.log"
    logger = configure_logging("WARNING", destination.as_posix())

    assert logger.logger.level == logging.WARNING
    handler = logger.logger.handlers[0]
    assert handler.baseFilename == destination.as_posix()

    logging.getLogger("pathbox.validator").warning("file log test")

    handler.flush()
    assert "file log test" in destination.read_text()


def test_configure_logging_replaces_previous_handlers():
    configure_logging("INFO", "stdout")
    logger = configure_logging("INFO", "stdout")
    assert len(logger.logger.handlers) == 1


def test_unknown_level_falls_back_to_info():
    logger = configure_logging("chatty", "stdout")
    assert logger.logger.level == logging.INFO


def test_correlation_id_filter_inserts_placeholder_when_missing():
    """Filter should default correlation_id to '-' for bare records."""
    log_filter = CorrelationIdFilter()
    record = logging.LogRecord(
        name="pathbox.validator",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="missing id",
        args=(),
        exc_info=None,
    )

    assert not hasattr(record, "correlation_id")
    assert log_filter.filter(record)
    assert record.correlation_id == "-"


def test_configure_logging_emits_event():
    """configure_logging announces itself with a 'logging_configured' event."""
    with patch("pathbox.bootstrap.logging_setup._build_handler") as mock_build:
        mock_handler = MagicMock()
        mock_handler.level = logging.INFO
        mock_build.return_value = mock_handler

        configure_logging("INFO", "stdout")

        assert mock_handler.handle.called
        record = mock_handler.handle.call_args[0][0]

        assert record.msg == "Logging configured"
        assert record.levelno == logging.INFO
        assert getattr(record, "event", None) == "logging_configured"
        assert getattr(record, "destination", None) == "stdout"
        assert getattr(record, "use_json", None) is True
