"""Config command handler for sigverify CLI.

This module handles configuration management operations, including
displaying current configuration and resetting to default values.
"""
# ruff: noqa: T201

from argparse import Namespace

from sigverify.cli.display import print_success
from sigverify.config import Settings

from .base import BaseCommandHandler


class ConfigHandler(BaseCommandHandler):
    """Handler for config command operations."""

    async def execute(self, args: Namespace) -> None:
        """Execute the config command."""
        if args.show:
            self._show_config(self.settings)
        elif args.reset:
            self._reset_config()

    def _show_config(self, settings: Settings) -> None:
        """Display current configuration."""
        print("📋 Current Configuration:")
        print(f"  Settings File: {self.settings_manager.settings_file}")
        print(f"  Config Version: {settings['config_version']}")
        print(f"  Log Level: {settings['log_level']}")
        print(f"  Console Log Level: {settings['console_log_level']}")
        for section in ("hashing", "signature", "queue"):
            print(f"  [{section}]")
            for key, value in settings[section].items():
                print(f"    {key}: {value}")

    def _reset_config(self) -> None:
        """Reset configuration to default values."""
        self.settings = self.settings_manager.reset_settings()
        print_success("Configuration reset to defaults")
