"""
Centralized Logging.

structlog on top of the stdlib logging module. All output goes to stderr:
stdout is reserved for the JSON result document.

Usage:
    from xapi_bridge.core.logging import get_logger, setup_logging

    setup_logging(level="DEBUG", format_type="console")
    logger = get_logger(__name__)
    logger.info("Calling method", method="VM.get_all")
"""

import logging
import sys
from typing import Any

import structlog

from xapi_bridge.core.config import load_settings_file

LOG_SOURCES = {"cli", "rpc", "session", "unknown"}

DEFAULT_LOGGING_CONFIG: dict[str, Any] = {
    "level": "WARNING",
    "format": "console",
}

_logging_config: dict[str, Any] | None = None


def _load_logging_config() -> dict[str, Any]:
    """Load config/settings/logging.yaml over the built-in defaults."""
    global _logging_config
    _logging_config = {**DEFAULT_LOGGING_CONFIG, **load_settings_file("logging.yaml")}
    return _logging_config


def _get_logging_config() -> dict[str, Any]:
    if _logging_config is None:
        return _load_logging_config()
    return _logging_config


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(level: str | None = None, format_type: str | None = None) -> None:
    """
    Configure structlog and the root logger.

    Args:
        level: Log level name. Defaults to logging.yaml's ``level``.
        format_type: ``console`` or ``json``. Defaults to logging.yaml's ``format``.
    """
    config = _get_logging_config()
    level = (level or config["level"]).upper()
    format_type = format_type or config["format"]

    if format_type == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    shared = _shared_processors()

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(logging.WARNING, root_logger.level))
    logging.getLogger("httpcore").setLevel(max(logging.WARNING, root_logger.level))


def get_logger(name: str) -> Any:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


def log_with_source(
    logger: Any,
    source: str,
    level: str,
    message: str,
    **kwargs: Any,
) -> None:
    """
    Log an event tagged with its source.

    Args:
        logger: structlog logger.
        source: One of LOG_SOURCES; anything else is recorded as ``unknown``.
        level: Method name on the logger (debug, info, warning, error, critical).
        message: Event message.
        **kwargs: Extra event fields.
    """
    if source not in LOG_SOURCES:
        source = "unknown"
    getattr(logger, level)(message, source=source, **kwargs)
