"""Main CLI entry point for sigverify.

This module provides the minimal entry point for the command-line
interface, delegating all functionality to specialized command
handlers and CLI components.
"""

import sys

import uvloop

from sigverify.cli import CLIRunner
from sigverify.logger import get_logger

logger = get_logger(__name__)


async def async_main() -> None:
    """Run the CLI asynchronously."""
    logger.info("CLI started")
    runner = CLIRunner()
    try:
        await runner.run()
        logger.debug("CLI completed successfully")
    except Exception:
        logger.exception("CLI encountered an error")
        raise


def main() -> None:
    """Run the CLI application on uvloop.

    Raises:
        SystemExit: With status 1 on cancellation or unexpected errors

    """
    try:
        uvloop.run(async_main())
    except KeyboardInterrupt:
        logger.info("CLI cancelled by user")
        sys.exit(1)
    except Exception:
        logger.exception("❌ Unexpected error")
        sys.exit(1)


if __name__ == "__main__":
    main()
