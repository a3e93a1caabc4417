"""Centralized constants module for sigverify.

This module serves as the single source of truth for all shared constants
across the sigverify codebase. Constants are organized by logical categories
and use typing.Final annotations to ensure immutability.

Usage:
    from sigverify.constants import CONFIG_VERSION
"""

from typing import Final, Literal

# =============================================================================
# Configuration Constants
# =============================================================================

# Configuration version - single source of truth for config versioning
CONFIG_VERSION: Final[str] = "1.0.0"

# Configuration file name
CONFIG_FILE_NAME: Final[str] = "settings.conf"

# Configuration directory names
CONFIG_DIR_NAME: Final[str] = ".config"
DEFAULT_CONFIG_SUBDIR: Final[str] = "sigverify"

# Log levels
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "WARNING"
VALID_LOG_LEVELS: Final[tuple[str, ...]] = (
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
)

ISO_DATETIME_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# INI sections and keys
SECTION_DEFAULT: Final[str] = "DEFAULT"
SECTION_HASHING: Final[str] = "hashing"
SECTION_SIGNATURE: Final[str] = "signature"
SECTION_QUEUE: Final[str] = "queue"

KEY_CONFIG_VERSION: Final[str] = "config_version"
KEY_LOG_LEVEL: Final[str] = "log_level"
KEY_CONSOLE_LOG_LEVEL: Final[str] = "console_log_level"

# =============================================================================
# Logging Constants
# =============================================================================

# Maximum size for rotated log files (bytes)
LOG_MAX_FILE_SIZE_BYTES: Final[int] = 1024 * 1024  # 1 MB

# Number of backup files to keep for rotated logs
LOG_BACKUP_COUNT: Final[int] = 3

# Console and file format strings used by the logger
LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Color mapping for console output levels
LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}

# Environment variable that redirects the log directory (used by tests)
LOG_DIR_ENV_VAR: Final[str] = "SIGVERIFY_LOG_DIR"

# =============================================================================
# Hashing Constants
# =============================================================================

HashType = Literal["md5", "sha1", "sha256", "sha512"]

SUPPORTED_HASH_ALGORITHMS: Final[tuple[HashType, ...]] = (
    "md5",
    "sha1",
    "sha256",
    "sha512",
)
DEFAULT_HASH_TYPE: Final[HashType] = "sha256"

# Digest hex length is the only authority for the algorithm of a line
HASH_LENGTH_MAP: Final[dict[int, HashType]] = {
    32: "md5",
    40: "sha1",
    64: "sha256",
    128: "sha512",
}

# Display labels
HASH_LABELS: Final[dict[str, str]] = {
    "md5": "MD5",
    "sha1": "SHA-1",
    "sha256": "SHA-256",
    "sha512": "SHA-512",
}

HASH_BACKEND_AUTO: Final[str] = "auto"
HASH_BACKEND_HASHLIB: Final[str] = "hashlib"
HASH_BACKEND_CRYPTOGRAPHY: Final[str] = "cryptography"
HASH_BACKEND_CHOICES: Final[tuple[str, ...]] = (
    HASH_BACKEND_AUTO,
    HASH_BACKEND_HASHLIB,
    HASH_BACKEND_CRYPTOGRAPHY,
)

DEFAULT_HASH_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
DEFAULT_HASH_PROGRESS_INTERVAL: Final[int] = 100 * 1024 * 1024  # 100 MiB
DEFAULT_CANCEL_CHECK_INTERVAL: Final[int] = 4  # chunks

# Progress stays below 100 until the digest is final
HASH_PROGRESS_CAP: Final[int] = 99

# =============================================================================
# Classification Constants
# =============================================================================

CLASSIFY_PREFIX_BYTES: Final[int] = 100
CLASSIFY_PREFIX_CHARS: Final[int] = 2000

ARMOR_PUBLIC_KEY: Final[str] = "-----BEGIN PGP PUBLIC KEY BLOCK-----"
ARMOR_SIGNED_MESSAGE: Final[str] = "-----BEGIN PGP SIGNED MESSAGE-----"
ARMOR_MESSAGE: Final[str] = "-----BEGIN PGP MESSAGE-----"
ARMOR_SIGNATURE: Final[str] = "-----BEGIN PGP SIGNATURE-----"

# OpenPGP packet tags (RFC 4880 section 4.3)
PACKET_TAG_SIGNATURE: Final[int] = 2
PACKET_TAG_ONE_PASS_SIGNATURE: Final[int] = 4
PACKET_TAG_SECRET_KEY: Final[int] = 5
PACKET_TAG_PUBLIC_KEY: Final[int] = 6
PACKET_TAG_SECRET_SUBKEY: Final[int] = 7
PACKET_TAG_COMPRESSED: Final[int] = 8
PACKET_TAG_LITERAL: Final[int] = 11
PACKET_TAG_PUBLIC_SUBKEY: Final[int] = 14

KEY_PACKET_TAGS: Final[frozenset[int]] = frozenset(
    {
        PACKET_TAG_SECRET_KEY,
        PACKET_TAG_PUBLIC_KEY,
        PACKET_TAG_SECRET_SUBKEY,
        PACKET_TAG_PUBLIC_SUBKEY,
    }
)
MESSAGE_PACKET_TAGS: Final[frozenset[int]] = frozenset(
    {
        PACKET_TAG_ONE_PASS_SIGNATURE,
        PACKET_TAG_COMPRESSED,
        PACKET_TAG_LITERAL,
    }
)

# =============================================================================
# Signature Verification Constants
# =============================================================================

# Detached payloads below this size are tried as text first
DEFAULT_TEXT_THRESHOLD: Final[int] = 1_000_000
# Characters inspected for NUL bytes before accepting a text decode
TEXT_NUL_SCAN_CHARS: Final[int] = 1000

DEFAULT_STREAM_CHUNK_SIZE: Final[int] = 64 * 1024  # 64 KiB
DEFAULT_SIGNATURE_PROGRESS_INTERVAL: Final[int] = 50 * 1024 * 1024  # 50 MiB

# Drain progress is capped here before the finalize stages
SIGNATURE_DRAIN_PROGRESS_CAP: Final[int] = 90

# Pipeline stages as (percent, message)
STAGE_INIT: Final[tuple[int, str]] = (10, "Reading public key...")
STAGE_FILE_READ: Final[tuple[int, str]] = (30, "Reading signed file...")
STAGE_PARSE: Final[tuple[int, str]] = (50, "Parsing signed message...")
STAGE_VERIFY: Final[tuple[int, str]] = (70, "Verifying signature...")
STAGE_CHECK: Final[tuple[int, str]] = (
    90,
    "Checking verification result...",
)
STAGE_FINALIZE: Final[tuple[int, str]] = (
    95,
    "Finalizing verification...",
)
STAGE_CHECK_SIGNATURE: Final[tuple[int, str]] = (97, "Checking signature...")
STAGE_COMPLETE: Final[tuple[int, str]] = (100, "Complete!")

# =============================================================================
# Queue Constants
# =============================================================================

# Seconds completed jobs stay visible after the queue drains
DEFAULT_GRACE_PERIOD: Final[float] = 3.0

# =============================================================================
# CLI Constants
# =============================================================================

# Exit status when the user cancelled work that was otherwise passing
EXIT_CANCELLED: Final[int] = 130
