"""
Centralized logging for the EVOLSTM forecaster.

Console output stays human readable while the rotating log file receives one
JSON object per record, tagged with a correlation ID so that every line of a
single evolution run can be grouped together.
"""

import functools
import json
import logging
import logging.handlers
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class CorrelationFilter(logging.Filter):
    """Stamps log records with the correlation ID of the current run."""

    def __init__(self):
        super().__init__()
        self.correlation_id = None

    def filter(self, record):
        if self.correlation_id:
            record.correlation_id = self.correlation_id
        return True

    def set_correlation_id(self, correlation_id: str):
        """Set the correlation ID for the current context."""
        self.correlation_id = correlation_id


class StructuredFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, 'correlation_id'):
            log_entry["correlation_id"] = record.correlation_id

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    enable_console: bool = True,
    enable_file: bool = True,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure the root logger for an EVOLSTM process.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of the structured log file, defaults to logs/evolstm.log
        enable_console: Whether to log to stdout
        enable_file: Whether to write the rotating JSON log file
        max_file_size: Size in bytes at which the log file rotates
        backup_count: Number of rotated files to keep

    Returns:
        Configured root logger
    """
    if log_file is None:
        log_file = Path("logs") / "evolstm.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        root_logger.addHandler(console_handler)

    if enable_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count
        )
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    # Only one correlation filter per root logger, even across repeated setup calls
    for existing in list(root_logger.filters):
        if isinstance(existing, CorrelationFilter):
            root_logger.removeFilter(existing)
    # Records from child loggers skip root filters, so handlers share the same instance
    correlation_filter = CorrelationFilter()
    root_logger.addFilter(correlation_filter)
    for handler in root_logger.handlers:
        handler.addFilter(correlation_filter)

    get_logger(__name__).info("EVOLSTM logging initialized", extra={
        "extra_fields": {
            "log_level": level,
            "log_file": str(log_file) if enable_file else None,
            "enable_console": enable_console,
        }
    })

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name (usually ``__name__``)."""
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str):
    """
    Set the correlation ID on the root logger's correlation filter.

    Args:
        correlation_id: Identifier shared by all records of one run
    """
    root_logger = logging.getLogger()
    for filter_obj in root_logger.filters:
        if isinstance(filter_obj, CorrelationFilter):
            filter_obj.set_correlation_id(correlation_id)
            break


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def log_with_correlation(func):
    """
    Decorator that runs a function under a fresh correlation ID and logs its
    start, completion and failure.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        correlation_id = generate_correlation_id()
        set_correlation_id(correlation_id)

        logger = get_logger(func.__module__)
        logger.debug(f"Starting {func.__name__}", extra={
            "extra_fields": {
                "correlation_id": correlation_id,
                "function": func.__name__,
            }
        })

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error in {func.__name__}: {e}", extra={
                "extra_fields": {
                    "correlation_id": correlation_id,
                    "function": func.__name__,
                    "error_type": type(e).__name__
                }
            }, exc_info=True)
            raise

        logger.debug(f"Completed {func.__name__}", extra={
            "extra_fields": {
                "correlation_id": correlation_id,
                "function": func.__name__,
                "result_type": type(result).__name__
            }
        })
        return result

    return wrapper
