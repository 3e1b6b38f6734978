"""
Logging configuration for the attendance matcher service.

Provides structured logging with service name context, on the console and
optionally in a size-rotated log file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = '[%(levelname)s] [service=%(service)s] %(message)s'
FILE_LOG_FORMAT = '%(asctime)s [%(levelname)s] [service=%(service)s] %(name)s: %(message)s'


class ServiceContextFilter(logging.Filter):
    """Add service context to log records."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


def setup_logging(
    service_name: str,
    debug: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> None:
    """
    Configure logging for the service.

    Args:
        service_name: Service identifier for log context
        debug: Enable debug level logging
        log_file: Also write to this file, rotated at max_bytes
        max_bytes: Size at which the log file is rotated
        backup_count: Number of rotated files kept
    """
    level = logging.DEBUG if debug else logging.INFO
    context = ServiceContextFilter(service_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler.addFilter(context)
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        file_handler.addFilter(context)
        root_logger.addHandler(file_handler)

    # Per-request access lines from the Flask dev server
    logging.getLogger('werkzeug').setLevel(logging.DEBUG if debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
