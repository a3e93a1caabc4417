"""Public logging API: setup, lookup, config updates and test cleanup."""

from __future__ import annotations

import atexit
import contextlib
import logging
import os
import threading
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sigverify.constants import (
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    LOG_DIR_ENV_VAR,
)
from sigverify.logger.handlers import (
    ROOT_LOGGER_NAME,
    create_console_handler,
    create_file_handler,
    start_queue_listener,
)

if TYPE_CHECKING:
    import queue
    from collections.abc import Mapping
    from logging.handlers import QueueListener


class _LoggerState:
    """Process-wide logging state.

    Attributes:
        lock: Guards one-time root logger initialization
        root_initialized: Whether the package root logger has handlers
        config_applied: Whether settings.conf levels were applied
        queue_listener: Background thread writing log records
        log_queue: Queue shared by every sigverify logger

    """

    def __init__(self) -> None:
        """Initialize empty state."""
        self.lock = threading.Lock()
        self.root_initialized = False
        self.config_applied = False
        self.queue_listener: QueueListener | None = None
        self.log_queue: queue.Queue | None = None


# Single source of truth for the QueueListener; see clear_logger_state()
_state = _LoggerState()


def get_state() -> _LoggerState:
    """Return the process-wide logger state."""
    return _state


def default_log_file() -> Path:
    """Return the log file path, honoring SIGVERIFY_LOG_DIR.

    Tests set SIGVERIFY_LOG_DIR so they never write to the user's
    ~/.config/sigverify/logs directory.
    """
    env_log_dir = os.getenv(LOG_DIR_ENV_VAR)
    if env_log_dir:
        return Path(env_log_dir).expanduser() / "sigverify.log"
    return Path.home() / ".config" / "sigverify" / "logs" / "sigverify.log"


def flush_all_handlers() -> None:
    """Block until queued records are written and handlers flushed."""
    state = get_state()
    if state.queue_listener is None or state.log_queue is None:
        return

    deadline = time.monotonic() + 5.0
    while not state.log_queue.empty() and time.monotonic() < deadline:
        time.sleep(0.01)
    # The listener may have dequeued a record it has not written yet
    time.sleep(0.1)

    for handler in state.queue_listener.handlers:
        with contextlib.suppress(OSError, ValueError):
            handler.flush()


def _cleanup_logging() -> None:
    """Stop the QueueListener at interpreter exit."""
    state = get_state()
    if state.queue_listener is not None:
        flush_all_handlers()
        state.queue_listener.stop()
        state.queue_listener = None


atexit.register(_cleanup_logging)


def setup_logging(
    name: str = ROOT_LOGGER_NAME,
    console_level: str | None = None,
    file_level: str | None = None,
    log_file: Path | None = None,
    enable_file_logging: bool = True,  # noqa: FBT001, FBT002
) -> logging.Logger:
    """Initialize the package root logger once and return a logger.

    Child loggers ("sigverify.core.hashing", ...) get no handlers of
    their own and propagate to the root, whose QueueHandler feeds the
    listener thread.

    Args:
        name: Logger name, normally __name__
        console_level: Console log level (default WARNING)
        file_level: File log level (default INFO)
        log_file: Log file path (default from default_log_file())
        enable_file_logging: Whether to attach the rotating file handler

    Returns:
        The requested logger

    Raises:
        ConfigurationError: If file logging cannot be set up

    """
    state = get_state()
    with state.lock:
        if not state.root_initialized:
            handlers: list[logging.Handler] = [
                create_console_handler(
                    console_level or DEFAULT_CONSOLE_LOG_LEVEL
                )
            ]
            if enable_file_logging:
                handlers.append(
                    create_file_handler(
                        log_file or default_log_file(),
                        file_level or DEFAULT_LOG_LEVEL,
                    )
                )
            state.log_queue, state.queue_listener = start_queue_listener(
                handlers
            )
            state.root_initialized = True

    return logging.getLogger(name)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger, initializing the root logger on first use.

    Example:
        >>> from sigverify.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Hashing %s", path.name)

    """
    return setup_logging(name=name)


def update_logger_from_config(
    settings: Mapping[str, Any] | None = None,
) -> None:
    """Apply log levels from settings to the running handlers.

    Only handler levels change; handlers are never added or removed.

    Args:
        settings: Loaded settings; read from settings.conf when omitted

    """
    state = get_state()
    if settings is None:
        from sigverify.config import SettingsManager  # noqa: PLC0415

        settings = SettingsManager().load_settings()

    console_level = getattr(
        logging,
        str(settings.get("console_log_level", DEFAULT_CONSOLE_LOG_LEVEL)),
        logging.WARNING,
    )
    file_level = getattr(
        logging,
        str(settings.get("log_level", DEFAULT_LOG_LEVEL)),
        logging.INFO,
    )

    if state.queue_listener is not None:
        for handler in state.queue_listener.handlers:
            if isinstance(handler, RotatingFileHandler):
                handler.setLevel(file_level)
            elif isinstance(handler, logging.StreamHandler):
                handler.setLevel(console_level)

    state.config_applied = True


def clear_logger_state() -> None:
    """Tear down all logging state. Intended for tests only.

    Stops the listener, closes handlers and forgets every "sigverify"
    logger so the next get_logger() call starts from scratch.
    """
    state = get_state()
    with state.lock:
        if state.queue_listener is not None:
            flush_all_handlers()
            state.queue_listener.stop()
            state.queue_listener = None
        state.log_queue = None
        state.root_initialized = False
        state.config_applied = False

        for logger_name in list(logging.Logger.manager.loggerDict):
            if logger_name.startswith(ROOT_LOGGER_NAME):
                instance = logging.getLogger(logger_name)
                for handler in instance.handlers[:]:
                    handler.close()
                    instance.removeHandler(handler)
                del logging.Logger.manager.loggerDict[logger_name]
