"""Base command handler for sigverify CLI commands.

This module provides the abstract base class that all command handlers
inherit from, ensuring consistent interface and shared functionality
across commands.
"""

from abc import ABC, abstractmethod
from argparse import Namespace

from sigverify.config import Settings, SettingsManager
from sigverify.logger import get_logger

logger = get_logger(__name__)


class BaseCommandHandler(ABC):
    """Abstract base class for all command handlers.

    CLIRunner acts as the composition root: it loads the settings once
    and injects them into every handler.

    Note:
        Concrete handlers must implement the execute() method.
    """

    def __init__(
        self,
        settings_manager: SettingsManager,
        settings: Settings,
    ) -> None:
        """Initialize the command handler with shared dependencies.

        Args:
            settings_manager: Settings file manager
            settings: Settings loaded by the runner

        """
        self.settings_manager = settings_manager
        self.settings = settings

    @abstractmethod
    async def execute(self, args: Namespace) -> None:
        """Execute the command with the given arguments.

        Args:
            args: Parsed command-line arguments

        This method must be implemented by all concrete command handlers.

        """
