"""Console implementation of the Presenter protocol."""
# ruff: noqa: T201

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from sigverify.cli.display import print_job, print_warning
from sigverify.domain.types import JobStatus
from sigverify.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sigverify.core.protocols.progress import ProgressType
    from sigverify.domain.types import (
        ChecksumManifest,
        ProgressState,
        SignatureResult,
        VerificationJob,
    )

logger = get_logger(__name__)

_YES = frozenset({"y", "yes"})


class ConsolePresenter:
    """Prints job results and asks confirmations on the terminal."""

    def __init__(
        self,
        *,
        quiet: bool = False,
        assume_yes: bool = False,
        show_progress: bool = False,
        prompt: Callable[[str], str] = input,
    ) -> None:
        """Create a presenter.

        Args:
            quiet: Print nothing (used for JSON output)
            assume_yes: Answer yes to every confirmation
            show_progress: Print progress updates to stderr
            prompt: Line reader used for confirmations

        """
        self.quiet = quiet
        self.assume_yes = assume_yes
        self.show_progress = show_progress
        self._prompt = prompt
        self.verified: frozenset[str] = frozenset()

    def job_updated(self, job: VerificationJob) -> None:
        """Print a job's result once it finished."""
        if self.quiet or job.status in (
            JobStatus.PENDING,
            JobStatus.PROCESSING,
        ):
            return
        print_job(job)

    def progress(
        self,
        progress_type: ProgressType,
        target: str,
        state: ProgressState,
    ) -> None:
        """Print a progress line to stderr when enabled."""
        if self.quiet or not self.show_progress:
            return
        print(
            f"🔄 {target}: {state.percent:5.1f}% {state.message}",
            file=sys.stderr,
        )

    def manifest_changed(
        self,
        manifest: ChecksumManifest | None,
        verified: frozenset[str],
    ) -> None:
        """Remember which manifest entries are verified."""
        self.verified = verified
        if manifest is not None:
            logger.debug(
                "%d of %d entries in %s verified",
                len(verified),
                len(manifest),
                manifest.source_name,
            )

    def signature_checked(self, result: SignatureResult) -> None:
        """Log the signature outcome; the verify command prints it."""
        logger.debug("Signature checked: valid=%s", result.valid)

    async def confirm_filename_mismatch(
        self,
        filenames: Sequence[str],
        manifest_names: Sequence[str],
    ) -> bool:
        """Ask whether to hash files the manifest does not list."""
        if self.assume_yes:
            return True
        if not sys.stdin.isatty():
            logger.info("Not a terminal, declining unlisted files")
            if not self.quiet:
                print_warning(
                    "None of the files is listed in the manifest. "
                    "Use --yes to check them anyway."
                )
            return False

        print_warning("None of these files is listed in the manifest:")
        for name in filenames:
            print(f"    {name}")
        print(f"The manifest lists {len(manifest_names)} files.")
        loop = asyncio.get_running_loop()
        answer = await loop.run_in_executor(
            None, self._prompt, "Hash them anyway? [y/N] "
        )
        return answer.strip().lower() in _YES
