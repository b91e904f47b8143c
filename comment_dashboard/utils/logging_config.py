"""Logging Configuration for the Comment Dashboard plugin

Centralized structlog setup with JSON output. Every component logs snake_case
events with keyword context, e.g. a fetch logs ``comments_fetched`` with the
file key and count, and a failed node lookup logs ``node_lookup_failed`` with
the comment and node identifiers.

Usage:
    >>> from comment_dashboard.utils.logging_config import setup_logging, get_logger
    >>> setup_logging()
    >>> logger = get_logger(__name__)
    >>> logger.info("comments_fetched", file_key="abc123", count=42)
    >>> logger.error("navigation_failed", exc_info=True, comment_id="c1")
"""

import logging
import sys
from pathlib import Path

import structlog


def setup_logging(
    log_dir: str = "logs",
    log_filename: str = "plugin.log",
    level: str = "DEBUG",
    console: bool = True,
) -> None:
    """Configure structlog with JSON rendering to a file and (optionally) stdout.

    Both structlog loggers and plain stdlib loggers end up in the same JSON
    stream, so third-party libraries (requests, uvicorn) are captured too.

    Args:
        log_dir: Directory for log files, created if missing (default: "logs")
        log_filename: Name of the log file (default: "plugin.log")
        level: Minimum level written to the log file (default: "DEBUG")
        console: Also echo INFO and above to stdout (default: True)

    Log entry format (JSON):
        {
            "event": "comments_fetched",
            "level": "info",
            "timestamp": "2026-10-17T12:34:56.789Z",
            "logger": "comment_dashboard.fetcher",
            "file_key": "abc123",
            "count": 42
        }
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / log_filename

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Final JSON rendering happens in the stdlib formatter
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=shared_processors,
    )

    file_level = getattr(logging, level.upper(), logging.DEBUG)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(file_level)
    root_logger.handlers.clear()
    root_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(max(logging.INFO, file_level))
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)


def get_logger(name: str = None):
    """Get a structlog logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)
