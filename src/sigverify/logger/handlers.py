"""Handler construction for the sigverify logging system.

All records flow through one queue: loggers only own a QueueHandler and a
background QueueListener thread writes to the console and the rotating log
file, so hashing coroutines never block on handler I/O.
"""

import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from sigverify.constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_DATE_FORMAT,
    LOG_CONSOLE_FORMAT,
    LOG_FILE_DATE_FORMAT,
    LOG_FILE_FORMAT,
    LOG_MAX_FILE_SIZE_BYTES,
)
from sigverify.exceptions import ConfigurationError
from sigverify.logger.formatters import HybridConsoleFormatter

ROOT_LOGGER_NAME = "sigverify"


def create_console_handler(console_level: str) -> logging.StreamHandler:
    """Create the console handler with hybrid formatting.

    Args:
        console_level: Log level name for console output

    Returns:
        Configured StreamHandler writing to stdout

    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        HybridConsoleFormatter(
            LOG_CONSOLE_FORMAT, datefmt=LOG_CONSOLE_DATE_FORMAT
        )
    )
    handler.setLevel(getattr(logging, console_level, logging.WARNING))
    return handler


def create_file_handler(
    log_file: Path, file_level: str
) -> RotatingFileHandler:
    """Create the rotating file handler, rolling over an oversized log.

    Args:
        log_file: Path to the log file
        file_level: Log level name for file output

    Returns:
        Configured RotatingFileHandler

    Raises:
        ConfigurationError: If the log directory or file cannot be opened

    """
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=LOG_MAX_FILE_SIZE_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(LOG_FILE_FORMAT, datefmt=LOG_FILE_DATE_FORMAT)
        )
        handler.setLevel(getattr(logging, file_level, logging.INFO))

        if (
            log_file.exists()
            and log_file.stat().st_size >= LOG_MAX_FILE_SIZE_BYTES
        ):
            handler.doRollover()
    except OSError as e:
        msg = f"Failed to setup file logging: {e}"
        raise ConfigurationError(msg, str(log_file)) from e
    else:
        return handler


def start_queue_listener(
    handlers: list[logging.Handler],
) -> tuple[queue.Queue, QueueListener]:
    """Attach a QueueHandler to the package root and start the listener.

    Args:
        handlers: Handlers the listener thread dispatches to

    Returns:
        Tuple of (log_queue, started listener)

    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)  # Filtering happens per handler
    root_logger.propagate = False

    for existing in root_logger.handlers[:]:
        existing.close()
        root_logger.removeHandler(existing)

    log_queue: queue.Queue = queue.Queue(-1)
    listener = QueueListener(
        log_queue, *handlers, respect_handler_level=True
    )
    listener.start()
    root_logger.addHandler(QueueHandler(log_queue))
    return log_queue, listener
