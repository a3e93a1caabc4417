"""INI parser utilities for sigverify configuration.

Helpers for reading settings.conf with inline comments and for writing it
back with user-facing documentation.
"""

import configparser
from datetime import UTC, datetime

from sigverify.constants import (
    CONFIG_VERSION,
    ISO_DATETIME_FORMAT,
    KEY_CONFIG_VERSION,
    SECTION_DEFAULT,
    SECTION_HASHING,
    SECTION_QUEUE,
    SECTION_SIGNATURE,
)


def strip_inline_comment(value: str) -> str:
    """Strip a trailing '  # comment' from a configuration value.

    Args:
        value: Raw configuration value

    Returns:
        Value without the inline comment

    """
    if "  #" in value:
        return value.split("  #")[0].strip()
    return value.strip()


def create_parser() -> configparser.ConfigParser:
    """Create the ConfigParser used for settings.conf."""
    return configparser.ConfigParser(
        inline_comment_prefixes=("#", ";"),
        interpolation=None,
    )


class ConfigCommentManager:
    """Comments written into settings.conf for the user."""

    @staticmethod
    def get_file_header() -> str:
        """Return the file header with a generation timestamp."""
        timestamp = datetime.now(tz=UTC).strftime(ISO_DATETIME_FORMAT)
        return f"""# sigverify configuration
# Settings for offline signature and checksum verification.
#
# Last updated: {timestamp}
# Configuration version: {CONFIG_VERSION}

"""

    @staticmethod
    def get_section_comments() -> dict[str, str]:
        """Return the comment block written above each section."""
        return {
            SECTION_DEFAULT: """# ========================================
# MAIN CONFIGURATION
# ========================================
# config_version: Version of configuration format (DO NOT EDIT)
# log_level: Detail level for log files (DEBUG, INFO, WARNING, ERROR)
# console_log_level: Console output detail level (DEBUG, INFO, etc.)

""",
            SECTION_HASHING: """
# ========================================
# CHECKSUM HASHING
# ========================================
# chunk_size: Bytes read per chunk while hashing
# progress_interval: Bytes hashed between progress updates
# cancel_check_interval: Chunks read between cancellation checks
# backend: auto, hashlib or cryptography
# algorithm: Default algorithm for the digest command

""",
            SECTION_SIGNATURE: """
# ========================================
# SIGNATURE VERIFICATION
# ========================================
# stream_chunk_size: Bytes per chunk for large detached payloads
# text_threshold: Payloads below this size are tried as text first
# progress_interval: Bytes streamed between progress updates

""",
            SECTION_QUEUE: """
# ========================================
# VERIFICATION QUEUE
# ========================================
# grace_period: Seconds finished jobs stay listed after the queue drains

""",
        }

    @staticmethod
    def get_key_comments() -> dict[str, dict[str, str]]:
        """Return inline comments keyed by section and option."""
        return {
            SECTION_DEFAULT: {
                KEY_CONFIG_VERSION: "# DO NOT MODIFY - Config format version",
            },
            SECTION_HASHING: {"chunk_size": "# 1 MiB"},
            SECTION_SIGNATURE: {"stream_chunk_size": "# 64 KiB"},
            SECTION_QUEUE: {},
        }
