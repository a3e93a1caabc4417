"""Shared helper functions for CLI command handlers."""
# ruff: noqa: T201

import asyncio
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sigverify.cli.presenter import ConsolePresenter
from sigverify.core.session import VerificationSession
from sigverify.domain.types import VerificationArtifact
from sigverify.exceptions import ArtifactReadError
from sigverify.logger import get_logger

logger = get_logger(__name__)

STDIN_NAME = "-"


def open_artifact(path: str) -> VerificationArtifact:
    """Create an artifact for a command-line path.

    ``-`` reads standard input into memory.

    Raises:
        ArtifactReadError: If the path is missing or not a regular file

    """
    if path == STDIN_NAME:
        return VerificationArtifact.from_bytes(
            sys.stdin.buffer.read(), name="<stdin>"
        )
    file_path = Path(path).expanduser()
    try:
        if not file_path.is_file():
            msg = "not a regular file"
            raise ArtifactReadError(msg, path)
        return VerificationArtifact.from_path(file_path)
    except OSError as e:
        raise ArtifactReadError(str(e), path) from e


def open_artifacts(paths: list[str]) -> list[VerificationArtifact]:
    """Create artifacts for several paths, failing on the first bad one."""
    return [open_artifact(path) for path in paths]


def create_presenter(args: object) -> ConsolePresenter:
    """Build the console presenter for a queue-running command."""
    json_output = bool(getattr(args, "json", False))
    return ConsolePresenter(
        quiet=json_output,
        assume_yes=bool(getattr(args, "yes", False)),
        show_progress=bool(getattr(args, "progress", False))
        and not json_output,
    )


class InterruptHandler:
    """Turns Ctrl+C into a cancellation of the session's running work.

    The first interrupt cancels the signature check or the file being
    hashed, and the queue moves on. A second interrupt, or one that
    arrives while nothing is running, raises KeyboardInterrupt.
    """

    def __init__(self, session: VerificationSession) -> None:
        self.session = session
        self.interrupted = False

    def __call__(self) -> None:
        if self.interrupted or not self.session.cancel():
            raise KeyboardInterrupt
        self.interrupted = True
        logger.info("Cancellation requested by user")
        print(
            "\n⏹️  Cancelling... press Ctrl+C again to quit",
            file=sys.stderr,
        )


@contextmanager
def cancel_on_interrupt(
    session: VerificationSession,
) -> Iterator[InterruptHandler]:
    """Route SIGINT to ``session.cancel()`` inside the block.

    Must be entered from a coroutine. Where the running loop cannot
    handle signals, Ctrl+C keeps its default behavior.
    """
    loop = asyncio.get_running_loop()
    handler = InterruptHandler(session)
    try:
        loop.add_signal_handler(signal.SIGINT, handler)
    except (NotImplementedError, RuntimeError) as e:
        logger.debug("SIGINT handler not installed: %s", e)
        yield handler
        return
    try:
        yield handler
    finally:
        loop.remove_signal_handler(signal.SIGINT)
