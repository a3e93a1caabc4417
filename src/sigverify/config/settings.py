"""Settings manager for the INI configuration file."""

from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import TypedDict

from sigverify.config.parser import (
    ConfigCommentManager,
    create_parser,
    strip_inline_comment,
)
from sigverify.config.paths import Paths
from sigverify.constants import (
    CONFIG_FILE_NAME,
    CONFIG_VERSION,
    DEFAULT_CANCEL_CHECK_INTERVAL,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_GRACE_PERIOD,
    DEFAULT_HASH_CHUNK_SIZE,
    DEFAULT_HASH_PROGRESS_INTERVAL,
    DEFAULT_HASH_TYPE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SIGNATURE_PROGRESS_INTERVAL,
    DEFAULT_STREAM_CHUNK_SIZE,
    DEFAULT_TEXT_THRESHOLD,
    HASH_BACKEND_AUTO,
    HASH_BACKEND_CHOICES,
    KEY_CONFIG_VERSION,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_LOG_LEVEL,
    SECTION_DEFAULT,
    SECTION_HASHING,
    SECTION_QUEUE,
    SECTION_SIGNATURE,
    SUPPORTED_HASH_ALGORITHMS,
    VALID_LOG_LEVELS,
)
from sigverify.exceptions import ConfigurationError

# The logger package imports this module lazily; stay on plain logging here
logger = logging.getLogger(__name__)


class HashingSettings(TypedDict):
    """Settings for the hash computation engine."""

    chunk_size: int
    progress_interval: int
    cancel_check_interval: int
    backend: str
    algorithm: str


class SignatureSettings(TypedDict):
    """Settings for the signature verification pipeline."""

    stream_chunk_size: int
    text_threshold: int
    progress_interval: int


class QueueSettings(TypedDict):
    """Settings for the verification queue."""

    grace_period: float


class Settings(TypedDict):
    """Typed view of settings.conf."""

    config_version: str
    log_level: str
    console_log_level: str
    hashing: HashingSettings
    signature: SignatureSettings
    queue: QueueSettings


RawSettings = dict[str, str | dict[str, str]]


class SettingsManager:
    """Load, validate and save settings.conf."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the manager.

        Args:
            config_dir: Configuration directory (defaults to
                Paths.CONFIG_DIR)

        """
        self.config_dir = config_dir or Paths.CONFIG_DIR
        self.settings_file = self.config_dir / CONFIG_FILE_NAME

    @staticmethod
    def get_default_settings() -> RawSettings:
        """Return default settings as raw INI strings."""
        return {
            KEY_CONFIG_VERSION: CONFIG_VERSION,
            KEY_LOG_LEVEL: DEFAULT_LOG_LEVEL,
            KEY_CONSOLE_LOG_LEVEL: DEFAULT_CONSOLE_LOG_LEVEL,
            SECTION_HASHING: {
                "chunk_size": str(DEFAULT_HASH_CHUNK_SIZE),
                "progress_interval": str(DEFAULT_HASH_PROGRESS_INTERVAL),
                "cancel_check_interval": str(DEFAULT_CANCEL_CHECK_INTERVAL),
                "backend": HASH_BACKEND_AUTO,
                "algorithm": DEFAULT_HASH_TYPE,
            },
            SECTION_SIGNATURE: {
                "stream_chunk_size": str(DEFAULT_STREAM_CHUNK_SIZE),
                "text_threshold": str(DEFAULT_TEXT_THRESHOLD),
                "progress_interval": str(
                    DEFAULT_SIGNATURE_PROGRESS_INTERVAL
                ),
            },
            SECTION_QUEUE: {"grace_period": str(DEFAULT_GRACE_PERIOD)},
        }

    def _create_config_from_defaults(self) -> configparser.ConfigParser:
        """Build a ConfigParser populated with the defaults."""
        config = create_parser()
        defaults = self.get_default_settings()
        config.read_dict(
            {
                SECTION_DEFAULT: {
                    key: value
                    for key, value in defaults.items()
                    if isinstance(value, str)
                }
            }
        )
        for section, values in defaults.items():
            if isinstance(values, dict):
                config.add_section(section)
                for key, value in values.items():
                    config.set(section, key, value)
        return config

    def load_settings(self) -> Settings:
        """Load settings, creating settings.conf from defaults if missing.

        Returns:
            Validated settings

        Raises:
            ConfigurationError: If a value is malformed or out of range

        """
        config = self._create_config_from_defaults()
        if self.settings_file.exists():
            try:
                config.read(self.settings_file, encoding="utf-8")
            except configparser.Error as e:
                msg = f"Cannot parse settings file: {e}"
                raise ConfigurationError(
                    msg, str(self.settings_file)
                ) from e
        else:
            settings = self._convert(config)
            self.save_settings(settings)
            logger.debug("Created default settings at %s", self.settings_file)
            return settings

        return self._convert(config)

    def build_default_settings(self) -> Settings:
        """Return the defaults as validated settings."""
        return self._convert(self._create_config_from_defaults())

    def reset_settings(self) -> Settings:
        """Overwrite settings.conf with the defaults."""
        settings = self.build_default_settings()
        self.save_settings(settings)
        logger.info("Settings reset to defaults: %s", self.settings_file)
        return settings

    def save_settings(self, settings: Settings) -> None:
        """Write settings.conf with explanatory comments.

        Args:
            settings: Settings to persist

        """
        Paths.ensure_directories(self.config_dir)
        comments = ConfigCommentManager()
        section_comments = comments.get_section_comments()
        key_comments = comments.get_key_comments()

        sections: dict[str, dict[str, object]] = {
            SECTION_DEFAULT: {
                KEY_CONFIG_VERSION: settings["config_version"],
                KEY_LOG_LEVEL: settings["log_level"],
                KEY_CONSOLE_LOG_LEVEL: settings["console_log_level"],
            },
            SECTION_HASHING: dict(settings["hashing"]),
            SECTION_SIGNATURE: dict(settings["signature"]),
            SECTION_QUEUE: dict(settings["queue"]),
        }

        with self.settings_file.open("w", encoding="utf-8") as f:
            f.write(comments.get_file_header())
            for section, values in sections.items():
                f.write(section_comments[section])
                f.write(f"[{section}]\n")
                for key, value in values.items():
                    inline_comment = key_comments[section].get(key, "")
                    if inline_comment:
                        f.write(f"{key} = {value}  {inline_comment}\n")
                    else:
                        f.write(f"{key} = {value}\n")

    def _convert(self, config: configparser.ConfigParser) -> Settings:
        """Convert a ConfigParser into validated typed settings."""

        def get(section: str, key: str) -> str:
            return strip_inline_comment(config.get(section, key))

        log_level = get(SECTION_DEFAULT, KEY_LOG_LEVEL).upper()
        console_level = get(SECTION_DEFAULT, KEY_CONSOLE_LOG_LEVEL).upper()
        for level in (log_level, console_level):
            if level not in VALID_LOG_LEVELS:
                msg = f"Unknown log level: {level}"
                raise ConfigurationError(msg, str(self.settings_file))

        backend = get(SECTION_HASHING, "backend").lower()
        if backend not in HASH_BACKEND_CHOICES:
            msg = (
                f"Unknown hash backend '{backend}', "
                f"expected one of {', '.join(HASH_BACKEND_CHOICES)}"
            )
            raise ConfigurationError(msg, str(self.settings_file))

        algorithm = get(SECTION_HASHING, "algorithm").lower()
        if algorithm not in SUPPORTED_HASH_ALGORITHMS:
            msg = f"Unsupported hash algorithm: {algorithm}"
            raise ConfigurationError(msg, str(self.settings_file))

        return Settings(
            config_version=get(SECTION_DEFAULT, KEY_CONFIG_VERSION),
            log_level=log_level,
            console_log_level=console_level,
            hashing=HashingSettings(
                chunk_size=self._positive_int(
                    get(SECTION_HASHING, "chunk_size"), "chunk_size"
                ),
                progress_interval=self._positive_int(
                    get(SECTION_HASHING, "progress_interval"),
                    "progress_interval",
                ),
                cancel_check_interval=self._positive_int(
                    get(SECTION_HASHING, "cancel_check_interval"),
                    "cancel_check_interval",
                ),
                backend=backend,
                algorithm=algorithm,
            ),
            signature=SignatureSettings(
                stream_chunk_size=self._positive_int(
                    get(SECTION_SIGNATURE, "stream_chunk_size"),
                    "stream_chunk_size",
                ),
                text_threshold=self._positive_int(
                    get(SECTION_SIGNATURE, "text_threshold"),
                    "text_threshold",
                ),
                progress_interval=self._positive_int(
                    get(SECTION_SIGNATURE, "progress_interval"),
                    "progress_interval",
                ),
            ),
            queue=QueueSettings(
                grace_period=self._non_negative_float(
                    get(SECTION_QUEUE, "grace_period"), "grace_period"
                ),
            ),
        )

    def _positive_int(self, value: str, key: str) -> int:
        try:
            number = int(value)
        except ValueError as e:
            msg = f"{key} must be an integer, got '{value}'"
            raise ConfigurationError(msg, str(self.settings_file)) from e
        if number <= 0:
            msg = f"{key} must be positive, got {number}"
            raise ConfigurationError(msg, str(self.settings_file))
        return number

    def _non_negative_float(self, value: str, key: str) -> float:
        try:
            number = float(value)
        except ValueError as e:
            msg = f"{key} must be a number, got '{value}'"
            raise ConfigurationError(msg, str(self.settings_file)) from e
        if number < 0:
            msg = f"{key} must not be negative, got {number}"
            raise ConfigurationError(msg, str(self.settings_file))
        return number


def default_settings() -> Settings:
    """Return validated defaults without touching the filesystem."""
    return SettingsManager().build_default_settings()
