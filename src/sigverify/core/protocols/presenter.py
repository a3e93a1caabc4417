"""Presentation protocol for the verification engine.

The engine never renders anything itself. Whatever shows results to the
user (the CLI, a test double) implements Presenter and receives typed
events; the engine asks it for one decision, whether to proceed when no
uploaded filename appears in the manifest.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sigverify.core.protocols.progress import ProgressType
    from sigverify.domain.types import (
        ChecksumManifest,
        ProgressState,
        SignatureResult,
        VerificationJob,
    )


@runtime_checkable
class Presenter(Protocol):
    """Receiver of engine events and source of confirmations."""

    def job_updated(self, job: VerificationJob) -> None:
        """Handle a queue job changing status or receiving its result."""
        ...

    def progress(
        self,
        progress_type: ProgressType,
        target: str,
        state: ProgressState,
    ) -> None:
        """Handle a progress update for the named artifact."""
        ...

    def manifest_changed(
        self,
        manifest: ChecksumManifest | None,
        verified: frozenset[str],
    ) -> None:
        """Handle a new manifest or a change in its verified entries."""
        ...

    def signature_checked(self, result: SignatureResult) -> None:
        """Handle the result of a signature verification."""
        ...

    async def confirm_filename_mismatch(
        self,
        filenames: Sequence[str],
        manifest_names: Sequence[str],
    ) -> bool:
        """Ask whether to hash files that the manifest does not list.

        Args:
            filenames: Names of the files the user supplied
            manifest_names: Names the manifest does list

        Returns:
            True to proceed with hashing, False to discard the batch

        """
        ...


class NullPresenter:
    """Presenter that ignores events and declines confirmations."""

    def job_updated(self, job: VerificationJob) -> None:
        """Ignore job update."""

    def progress(
        self,
        progress_type: ProgressType,
        target: str,
        state: ProgressState,
    ) -> None:
        """Ignore progress update."""

    def manifest_changed(
        self,
        manifest: ChecksumManifest | None,
        verified: frozenset[str],
    ) -> None:
        """Ignore manifest change."""

    def signature_checked(self, result: SignatureResult) -> None:
        """Ignore signature result."""

    async def confirm_filename_mismatch(
        self,
        filenames: Sequence[str],
        manifest_names: Sequence[str],
    ) -> bool:
        """Decline, so nothing unlisted is hashed without a real user."""
        return False
