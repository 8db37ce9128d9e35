"""
Unit Tests for Centralized Logging.

Tests the logging configuration and source tagging.
"""

import logging
import sys
from unittest.mock import MagicMock, patch

import structlog


class TestLogSources:
    """Tests for LOG_SOURCES constant."""

    def test_log_sources_contains_expected_values(self):
        """Should contain all expected log sources."""
        from xapi_bridge.core.logging import LOG_SOURCES

        assert LOG_SOURCES == {"cli", "rpc", "session", "unknown"}


class TestLoggingConfigLoading:
    """Tests for logging configuration loading from YAML."""

    def test_load_logging_config_reads_yaml_file(self, tmp_path):
        """Should load configuration from logging.yaml."""
        from xapi_bridge.core import logging as logging_module

        config_dir = tmp_path / "config" / "settings"
        config_dir.mkdir(parents=True)
        (config_dir / "logging.yaml").write_text('level: "DEBUG"\nformat: "json"\n')

        with patch("xapi_bridge.core.config.find_project_root", return_value=tmp_path):
            config = logging_module._load_logging_config()

        assert config["level"] == "DEBUG"
        assert config["format"] == "json"

    def test_missing_file_falls_back_to_defaults(self, tmp_path):
        """Should use built-in defaults when logging.yaml doesn't exist."""
        from xapi_bridge.core import logging as logging_module

        with patch("xapi_bridge.core.config.find_project_root", return_value=tmp_path):
            config = logging_module._load_logging_config()

        assert config == {"level": "WARNING", "format": "console"}

    def test_partial_file_keeps_remaining_defaults(self, tmp_path):
        """Keys missing from logging.yaml should keep their defaults."""
        from xapi_bridge.core import logging as logging_module

        config_dir = tmp_path / "config" / "settings"
        config_dir.mkdir(parents=True)
        (config_dir / "logging.yaml").write_text('level: "INFO"\n')

        with patch("xapi_bridge.core.config.find_project_root", return_value=tmp_path):
            config = logging_module._load_logging_config()

        assert config["level"] == "INFO"
        assert config["format"] == "console"

    def test_config_is_cached(self, tmp_path):
        """Should cache the configuration after first load."""
        from xapi_bridge.core import logging as logging_module

        with patch("xapi_bridge.core.config.find_project_root", return_value=tmp_path):
            config1 = logging_module._load_logging_config()
            config2 = logging_module._get_logging_config()

        assert config1 is config2


class TestSetupLogging:
    """Tests for setup_logging function."""

    def _patched_config(self, level="INFO", format_type="console"):
        return patch(
            "xapi_bridge.core.logging._get_logging_config",
            return_value={"level": level, "format": format_type},
        )

    def test_setup_logging_configures_root_logger(self):
        """Should configure the root logger with the requested level."""
        from xapi_bridge.core.logging import setup_logging

        with self._patched_config():
            setup_logging(level="DEBUG", format_type="json")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_uses_config_defaults(self):
        """Should use values from logging.yaml when not overridden."""
        from xapi_bridge.core.logging import setup_logging

        with self._patched_config(level="INFO"):
            setup_logging()

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_writes_to_stderr_only(self):
        """Should install a single handler bound to stderr."""
        from xapi_bridge.core.logging import setup_logging

        with self._patched_config():
            setup_logging(level="INFO")

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert handlers[0].stream is sys.stderr

    def test_json_format_uses_json_renderer(self):
        """format_type=json should render events as JSON."""
        from xapi_bridge.core.logging import setup_logging

        with self._patched_config():
            setup_logging(format_type="json")

        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter.processors[-1], structlog.processors.JSONRenderer)

    def test_console_format_uses_console_renderer(self):
        """format_type=console should render events for humans."""
        from xapi_bridge.core.logging import setup_logging

        with self._patched_config():
            setup_logging(format_type="console")

        formatter = logging.getLogger().handlers[0].formatter
        assert isinstance(formatter.processors[-1], structlog.dev.ConsoleRenderer)

    def test_httpx_is_quietened(self):
        """httpx request logs should stay at WARNING even under DEBUG."""
        from xapi_bridge.core.logging import setup_logging

        with self._patched_config():
            setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_returns_structlog_logger(self):
        """Should return a structlog logger."""
        from xapi_bridge.core.logging import get_logger

        logger = get_logger("test.module")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")
        assert hasattr(logger, "error")


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_log_with_source_adds_source_field(self):
        """Should add source field to log call."""
        from xapi_bridge.core.logging import get_logger, log_with_source

        logger = get_logger("test")
        mock_info = MagicMock()

        with patch.object(logger, "info", mock_info):
            log_with_source(logger, "rpc", "info", "Test message", method="VM.get_all")

        mock_info.assert_called_once_with("Test message", source="rpc", method="VM.get_all")

    def test_log_with_source_replaces_unknown_source(self):
        """Sources outside LOG_SOURCES should be recorded as unknown."""
        from xapi_bridge.core.logging import get_logger, log_with_source

        logger = get_logger("test")
        mock_warning = MagicMock()

        with patch.object(logger, "warning", mock_warning):
            log_with_source(logger, "telegram", "warning", "Test message")

        mock_warning.assert_called_once_with("Test message", source="unknown")

    def test_log_with_source_supports_different_levels(self):
        """Should support different log levels."""
        from xapi_bridge.core.logging import get_logger, log_with_source

        logger = get_logger("test")

        for level in ["debug", "info", "warning", "error", "critical"]:
            mock_method = MagicMock()
            with patch.object(logger, level, mock_method):
                log_with_source(logger, "cli", level, f"Test {level}")
                mock_method.assert_called_once()
