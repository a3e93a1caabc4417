"""Configuration management: INI settings and path utilities."""

from sigverify.config.parser import ConfigCommentManager
from sigverify.config.paths import Paths
from sigverify.config.settings import (
    HashingSettings,
    QueueSettings,
    Settings,
    SettingsManager,
    SignatureSettings,
    default_settings,
)

__all__ = [
    "ConfigCommentManager",
    "HashingSettings",
    "Paths",
    "QueueSettings",
    "Settings",
    "SettingsManager",
    "SignatureSettings",
    "default_settings",
]
