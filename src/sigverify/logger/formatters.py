"""Console formatters for the sigverify logging system.

INFO records are user-facing output (verification results, progress
notices) and are printed bare. Everything else carries a timestamp, the
logger name and a colored level so warnings stand out from results.
"""

import logging

from sigverify.constants import LOG_COLORS


class ColoredConsoleFormatter(logging.Formatter):
    """Structured formatter that wraps the level name in ANSI colors."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record with a colored level name.

        The record's levelname is restored afterwards so other handlers
        sharing the record (the file handler) never see escape codes.

        Args:
            record: The log record to format

        Returns:
            Formatted log line

        """
        color = LOG_COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        original_levelname = record.levelname
        record.levelname = f"{color}{original_levelname}{LOG_COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


class HybridConsoleFormatter(logging.Formatter):
    """Print INFO records as the bare message, others structured.

    Example Output:
        INFO:     "✅ Signature valid"
        WARNING:  "12:30:45 - sigverify.core.queue - WARNING - ..."

    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
    ) -> None:
        """Initialize with the structured format used for non-INFO levels.

        Args:
            fmt: Format string for structured messages
            datefmt: Date format string for timestamps

        """
        super().__init__(fmt, datefmt)
        self._colored_formatter = ColoredConsoleFormatter(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        """Format a record according to its level."""
        if record.levelno == logging.INFO:
            return record.getMessage()
        return self._colored_formatter.format(record)
