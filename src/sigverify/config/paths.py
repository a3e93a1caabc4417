"""Path constants and utilities for sigverify configuration."""

from pathlib import Path

from sigverify.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_SUBDIR,
)


class Paths:
    """Application paths and directory structure."""

    HOME_DIR = Path.home()
    CONFIG_DIR = HOME_DIR / CONFIG_DIR_NAME / DEFAULT_CONFIG_SUBDIR
    LOGS_DIR = CONFIG_DIR / "logs"
    SETTINGS_FILE = CONFIG_DIR / CONFIG_FILE_NAME

    @classmethod
    def expand_path(cls, path_str: str | Path) -> Path:
        """Expand ~ and resolve a user-supplied path.

        Args:
            path_str: Path string from the command line or settings

        Returns:
            Absolute path

        """
        return Path(path_str).expanduser().resolve()

    @classmethod
    def ensure_directories(cls, config_dir: Path | None = None) -> None:
        """Create the configuration and log directories if missing."""
        base = config_dir or cls.CONFIG_DIR
        for directory in (base, base / "logs"):
            directory.mkdir(parents=True, exist_ok=True)
