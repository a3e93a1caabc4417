"""CLI runner for sigverify.

Orchestrates the execution of CLI commands by routing parsed
arguments to the appropriate command handlers.
"""
# ruff: noqa: T201

import sys
from argparse import Namespace

from sigverify import __version__
from sigverify.cli.commands import (
    BaseCommandHandler,
    CheckHandler,
    ClassifyHandler,
    ConfigHandler,
    DigestHandler,
    VerifyHandler,
)
from sigverify.cli.display import print_cancelled, print_error, print_hint
from sigverify.cli.parser import CLIParser
from sigverify.config import SettingsManager
from sigverify.constants import EXIT_CANCELLED
from sigverify.exceptions import (
    InputFormatError,
    OperationCancelled,
    VerifierError,
)
from sigverify.logger import get_logger, update_logger_from_config

logger = get_logger(__name__)


class CLIRunner:
    """CLI command runner and orchestrator."""

    def __init__(
        self, settings_manager: SettingsManager | None = None
    ) -> None:
        """Initialize CLI runner with shared dependencies.

        Loads settings, applies their log levels and creates the command
        handlers.

        Raises:
            ConfigurationError: If settings.conf holds invalid values

        """
        self.settings_manager = settings_manager or SettingsManager()
        self.settings = self.settings_manager.load_settings()
        update_logger_from_config(self.settings)
        self._init_command_handlers()

    def _init_command_handlers(self) -> None:
        """Initialize all command handlers with shared dependencies."""
        handlers: dict[str, type[BaseCommandHandler]] = {
            "classify": ClassifyHandler,
            "digest": DigestHandler,
            "verify": VerifyHandler,
            "check": CheckHandler,
            "config": ConfigHandler,
        }
        self.command_handlers = {
            name: handler(self.settings_manager, self.settings)
            for name, handler in handlers.items()
        }

    async def run(self, argv: list[str] | None = None) -> None:
        """Run the CLI application.

        Parses arguments, handles global flags, validates commands,
        and routes to the appropriate handler. Verification errors are
        printed and end the process with status 1; a cancelled signature
        check ends it with EXIT_CANCELLED.
        """
        try:
            parser = CLIParser(self.settings)
            args = parser.parse_args(argv)

            if getattr(args, "version", False):
                print(__version__)
                return

            if not args.command:
                print("❌ No command specified. Use --help.")
                sys.exit(1)

            await self._execute_command(args)

        except KeyboardInterrupt:
            print("\n⏹️  Operation cancelled by user")
            sys.exit(1)
        except OperationCancelled as e:
            logger.info("%s", e)
            print_cancelled(str(e))
            sys.exit(EXIT_CANCELLED)
        except VerifierError as e:
            logger.error("%s", e)  # noqa: TRY400
            print_error(str(e))
            if isinstance(e, InputFormatError) and e.hint:
                print_hint(e.hint)
            sys.exit(1)

    async def _execute_command(self, args: Namespace) -> None:
        """Execute the specified command with the appropriate handler.

        Args:
            args: Parsed command-line arguments namespace.

        """
        command = args.command

        if command not in self.command_handlers:
            print(f"❌ Unknown command: {command}")
            sys.exit(1)

        logger.debug("Running command: %s", command)
        await self.command_handlers[command].execute(args)
