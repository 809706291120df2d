"""Centralized logging configuration for the pre-commit runner.

Provides:
- Console logging on stderr (simple format)
- Optional rotating file logging in text or structured JSON form
- Category loggers for the git, checks and runner components
- Debug context manager
"""

import json
import logging
import logging.handlers
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

LOGGER_NAME = "precommit_runner"


class LogCategory(Enum):
    """Log categories for per-component debugging."""

    RUNNER = "runner"
    CHECKS = "checks"
    GIT = "git"
    CONFIG = "config"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Produces one JSON object per record with consistent fields and any
    check-execution extras attached by the caller.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON string representation of the log entry.
        """
        log_entry: dict = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        extra_fields = ["duration_ms", "check", "command", "file_count"]
        for field in extra_fields:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(
    level: str = "INFO",
    quiet: bool = False,
    verbose: bool = False,
    log_file: Path | None = None,
    log_format: str = "text",
    file_level: str = "DEBUG",
    rotation_count: int = 3,
    max_bytes: int = 10485760,
) -> logging.Logger:
    """Setup logging for the runner.

    Args:
        level: Base log level (DEBUG, INFO, WARNING, ERROR).
        quiet: Suppress console output below ERROR.
        verbose: Enable debug-level console output.
        log_file: Optional log file; file logging is off when None.
        log_format: File output format ("text" or "json").
        file_level: Minimum level written to the log file.
        rotation_count: Number of backup files (default 3).
        max_bytes: Max file size before rotation (default 10MB).

    Returns:
        Configured package logger.
    """
    import logging.config

    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"
    else:
        effective_level = level.upper()

    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {"format": "%(levelname)s | %(message)s"},
            "json": {
                "()": JSONFormatter,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
                "level": effective_level,
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {
            LOGGER_NAME: {"handlers": ["console"], "level": "DEBUG", "propagate": False}
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "json" if log_format == "json" else "detailed",
            "level": file_level.upper(),
            "filename": str(log_file),
            "maxBytes": max_bytes,
            "backupCount": rotation_count,
        }
        config["loggers"][LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)
    return logging.getLogger(LOGGER_NAME)


def get_logger() -> logging.Logger:
    """Get the package logger."""
    return logging.getLogger(LOGGER_NAME)


def get_category_logger(category: LogCategory) -> logging.Logger:
    """Get a logger for a specific component.

    Example:
        >>> logger = get_category_logger(LogCategory.CHECKS)
        >>> logger.info("fumpt check completed")
    """
    return logging.getLogger(f"{LOGGER_NAME}.{category.value}")
