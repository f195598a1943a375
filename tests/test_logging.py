"""Tests for logging configuration module."""

import json
import logging
import sys
from io import StringIO
from unittest.mock import MagicMock, patch

from opentelemetry import trace
from pipeline_geo.core.logging import _add_otel_context, configure_logging


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_sets_log_level(self) -> None:
        configure_logging(log_level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

        configure_logging(log_level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_default_level_is_info(self) -> None:
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_level_is_case_insensitive(self) -> None:
        configure_logging(log_level="Debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_http_loggers_set_to_warning(self) -> None:
        """Per-request HTTP logs stay quiet even at DEBUG."""
        configure_logging(log_level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_replaces_existing_handlers(self) -> None:
        root_logger = logging.getLogger()
        dummy_handler = logging.StreamHandler()
        root_logger.addHandler(dummy_handler)

        configure_logging()

        assert dummy_handler not in root_logger.handlers
        assert len(root_logger.handlers) == 1
        handler = root_logger.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert handler.stream == sys.stdout

    def test_debug_renders_json(self) -> None:
        """At DEBUG, stdlib records are rendered as one JSON object per line."""
        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            configure_logging(log_level="DEBUG")
            logging.getLogger("pipeline_geo.test").info("pipelines_assembled")

        record = json.loads(mock_stdout.getvalue().strip().splitlines()[-1])
        assert record["event"] == "pipelines_assembled"
        assert record["level"] == "info"
        assert record["logger"] == "pipeline_geo.test"
        assert "timestamp" in record


class TestAddOtelContext:
    """Tests for _add_otel_context processor."""

    def test_adds_trace_and_span_ids_with_active_span(self) -> None:
        mock_span_context = MagicMock()
        mock_span_context.trace_id = 0x1234567890ABCDEF1234567890ABCDEF
        mock_span_context.span_id = 0x1234567890ABCDEF
        mock_span = MagicMock()
        mock_span.is_recording.return_value = True
        mock_span.get_span_context.return_value = mock_span_context

        with patch.object(trace, "get_current_span", return_value=mock_span):
            result = _add_otel_context(logging.getLogger(), "info", {"event": "test_event"})

        assert result["trace_id"] == "1234567890abcdef1234567890abcdef"
        assert result["span_id"] == "1234567890abcdef"

    def test_no_ids_without_recording_span(self) -> None:
        mock_span = MagicMock()
        mock_span.is_recording.return_value = False

        with patch.object(trace, "get_current_span", return_value=mock_span):
            result = _add_otel_context(logging.getLogger(), "info", {"event": "test_event"})

        assert "trace_id" not in result
        assert "span_id" not in result
        assert result["event"] == "test_event"
