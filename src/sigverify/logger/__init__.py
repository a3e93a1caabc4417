"""Logging utilities for sigverify.

Architecture:
    Application → QueueHandler → Queue → QueueListener Thread
                                              ↓
                                    Console + File Handlers

Rules:
    1. Always use: logger = get_logger(__name__)
    2. Never call logging.basicConfig()
    3. Only the "sigverify" root logger owns a handler (the QueueHandler)
    4. Use %-formatting in log calls, never f-strings

Environment Variables:
    SIGVERIFY_LOG_DIR: Redirects the log file, used by the test suite.
"""

from sigverify.logger.formatters import (
    ColoredConsoleFormatter,
    HybridConsoleFormatter,
)
from sigverify.logger.logger import (
    clear_logger_state,
    default_log_file,
    flush_all_handlers,
    get_logger,
    get_state,
    setup_logging,
    update_logger_from_config,
)

__all__ = [
    "ColoredConsoleFormatter",
    "HybridConsoleFormatter",
    "clear_logger_state",
    "default_log_file",
    "flush_all_handlers",
    "get_logger",
    "get_state",
    "setup_logging",
    "update_logger_from_config",
]
