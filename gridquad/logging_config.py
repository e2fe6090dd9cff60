"""Logging configuration utilities for gridquad.

The library is silent by default: the ``gridquad`` logger only carries a
NullHandler. Integrators log every refinement step at INFO, individual grid
evaluations at DEBUG and convergence at NOTICE. A run that does not converge
is reported at WARNING, and at ERROR and CRITICAL when ``integrate`` raises.
Turning on console logging is usually the first step when an integral
refuses to converge.

Example usage:
    import gridquad

    # Console logging, including per-iteration estimates
    gridquad.enable_console_logging(level="INFO")

    # Rotating file logging with JSON records
    gridquad.enable_file_logging("integration.log", json_format=True)

    # Configure from environment variables
    gridquad.configure_from_env()

Environment variables:
    GQ_LOGGING: Log level (DEBUG, INFO, NOTICE, WARNING, ERROR, CRITICAL)
    GQ_LOG_FILE: Path to log file (enables rotating file logging)
    GQ_LOG_JSON: Set to "1" for JSON output
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "NOTICE",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "gridquad"

# Between INFO and WARNING: a normal but significant event, such as a
# converged integral.
NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

LogLevel = Literal["DEBUG", "INFO", "NOTICE", "WARNING", "ERROR", "CRITICAL"]


class JsonFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects.

    Example output:
        {"timestamp": "2024-01-15T10:30:00.123456+00:00", "level": "NOTICE",
         "logger": "gridquad.numerics.integrators", "message": "Integral = 0.25 ..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra"):
            log_data["extra"] = record.extra

        return json.dumps(log_data)


def _get_level(level: str | int) -> int:
    """Convert a level name or number to a logging level constant."""
    if isinstance(level, int):
        return level
    name = level.upper()
    if name == "NOTICE":
        return NOTICE
    return getattr(logging, name, logging.INFO)


def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _clear_handlers() -> None:
    """Remove and close every handler on the gridquad logger except NullHandler."""
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def _install(handler: logging.Handler, level: LogLevel | int) -> None:
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    handler.setLevel(_get_level(level))
    logger.addHandler(handler)


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Enable console (stderr) logging for gridquad.

    Args:
        level: Log level name or number.
        format: Log message format string.
        date_format: Date format string for %(asctime)s.

    Returns:
        The created StreamHandler.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format, date_format))
    _install(handler, level)
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    json_format: bool = False,
) -> RotatingFileHandler:
    """Enable rotating file logging for gridquad.

    Long convergence studies at DEBUG level write one line per grid point, so
    the file is rotated once it reaches ``max_bytes``.

    Args:
        path: Path to the log file. Parent directories are created.
        level: Log level name or number.
        max_bytes: Maximum size of each log file in bytes. Default 10 MB.
        backup_count: Number of rotated files to keep. Default 5.
        json_format: Write JSON records instead of plain text lines.

    Returns:
        The created RotatingFileHandler.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, DEFAULT_DATE_FORMAT))
    _install(handler, level)
    return handler


def enable_json_logging(level: LogLevel | int = "INFO") -> logging.StreamHandler:
    """Enable JSON console logging for gridquad.

    Args:
        level: Log level name or number.

    Returns:
        The created StreamHandler with JsonFormatter.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    _install(handler, level)
    return handler


def configure_from_env() -> None:
    """Configure logging from the GQ_LOGGING, GQ_LOG_FILE and GQ_LOG_JSON variables.

    Does nothing when neither GQ_LOGGING nor GQ_LOG_FILE is set.
    """
    level = os.environ.get("GQ_LOGGING", "").upper()
    log_file = os.environ.get("GQ_LOG_FILE", "")
    use_json = os.environ.get("GQ_LOG_JSON", "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"

    if log_file:
        enable_file_logging(log_file, level=level, json_format=use_json)
    elif use_json:
        enable_json_logging(level=level)
    else:
        enable_console_logging(level=level)


def set_level(level: LogLevel | int) -> None:
    """Set the log level of the gridquad logger."""
    _get_logger().setLevel(_get_level(level))


def set_module_level(module: str, level: LogLevel | int) -> None:
    """Set the log level for one gridquad submodule.

    Args:
        module: Module name relative to gridquad (e.g. "numerics.integrators").
        level: Log level name or number.

    Example:
        >>> gridquad.enable_console_logging(level="DEBUG")
        >>> gridquad.set_module_level("numerics.function_map", "WARNING")
    """
    logging.getLogger(f"{LOGGER_NAME}.{module}").setLevel(_get_level(level))


def disable_logging() -> None:
    """Remove all handlers and silence the gridquad logger."""
    logger = _get_logger()
    _clear_handlers()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.CRITICAL + 1)
