"""Sequential checksum verification queue.

Files are verified one at a time in submission order against the loaded
manifest. Exactly one job is Processing at any instant; the next Pending
job starts only after the previous one reached Completed or Error.

Outcome of a job, by priority:

1. Name listed and digest matches: Verified
2. Name listed but digest differs: DigestMismatch
3. Name not listed but the content matches another entry:
   VerifiedByContent (a renamed file)
4. Otherwise: FilenameMismatch
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sigverify.config import QueueSettings, default_settings
from sigverify.constants import DEFAULT_HASH_TYPE
from sigverify.core.cancellation import CancellationScope
from sigverify.core.protocols.presenter import NullPresenter
from sigverify.core.protocols.progress import ProgressType
from sigverify.domain.types import (
    JobOutcome,
    JobResult,
    JobStatus,
    VerificationJob,
    VerifiedFileSet,
)
from sigverify.exceptions import (
    NoManifestLoadedError,
    OperationCancelled,
    VerifierError,
)
from sigverify.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sigverify.core.cancellation import CancellationToken
    from sigverify.core.hashing import HashEngine
    from sigverify.core.protocols.presenter import Presenter
    from sigverify.domain.types import (
        ChecksumManifest,
        ProgressState,
        VerificationArtifact,
    )

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class QueueSummary:
    """Aggregate counts over the jobs currently in the queue."""

    total: int
    completed: int
    verified: int
    mismatched: int
    cancelled: int
    errors: int

    @property
    def message(self) -> str:
        """``x of y files verified``."""
        return f"{self.verified} of {self.total} files verified"

    def to_dict(self) -> dict[str, int | str]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "total": self.total,
            "completed": self.completed,
            "verified": self.verified,
            "mismatched": self.mismatched,
            "cancelled": self.cancelled,
            "errors": self.errors,
            "message": self.message,
        }


class VerificationQueue:
    """FIFO scheduler of checksum verification jobs."""

    def __init__(
        self,
        engine: HashEngine,
        presenter: Presenter | None = None,
        settings: QueueSettings | None = None,
        verified: VerifiedFileSet | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            engine: Hash engine used for every job
            presenter: Receiver of job, progress and manifest events
            settings: Queue settings (defaults when omitted)
            verified: Verified file set to maintain; the queue is its only
                writer

        """
        self.engine = engine
        self.presenter = presenter or NullPresenter()
        self.settings = settings or default_settings()["queue"]
        self.verified = verified if verified is not None else VerifiedFileSet()
        self.jobs: list[VerificationJob] = []
        self._manifest: ChecksumManifest | None = None
        self._pending: deque[VerificationJob] = deque()
        self._scope = CancellationScope()
        self._worker: asyncio.Task[None] | None = None
        self._clear_handle: asyncio.TimerHandle | None = None

    @property
    def manifest(self) -> ChecksumManifest | None:
        """Manifest new jobs are checked against."""
        return self._manifest

    def set_manifest(self, manifest: ChecksumManifest) -> bool:
        """Load a manifest for subsequent jobs.

        Verified names survive when the new manifest has the same content
        as the old one and are dropped otherwise.

        Returns:
            True if previously verified names were dropped

        """
        self._manifest = manifest
        cleared = self.verified.bind(manifest.content_key)
        if cleared:
            logger.info("Manifest content changed, verified files reset")
        self.presenter.manifest_changed(manifest, self.verified.snapshot())
        return cleared

    @property
    def is_processing(self) -> bool:
        """Whether a worker is running jobs."""
        return self._worker is not None and not self._worker.done()

    @property
    def current(self) -> VerificationJob | None:
        """The job being processed, if any."""
        for job in self.jobs:
            if job.status is JobStatus.PROCESSING:
                return job
        return None

    async def enqueue(
        self, artifacts: Iterable[VerificationArtifact]
    ) -> list[VerificationJob]:
        """Queue files for verification against the loaded manifest.

        When none of the names appears in the manifest the presenter must
        confirm before anything is queued. A batch with at least one listed
        name is queued without asking.

        Returns:
            The new jobs, or an empty list if the batch was declined

        Raises:
            NoManifestLoadedError: If no manifest is loaded. Nothing is
                queued in that case.

        """
        manifest = self._manifest
        if manifest is None:
            msg = "load a checksum manifest before adding files"
            raise NoManifestLoadedError(msg)

        batch = list(artifacts)
        if not batch:
            return []

        names = [artifact.name for artifact in batch]
        if not any(name in manifest for name in names):
            logger.warning(
                "None of %d files is listed in %s",
                len(names),
                manifest.source_name,
            )
            confirmed = await self.presenter.confirm_filename_mismatch(
                names, list(manifest)
            )
            if not confirmed:
                logger.info("Discarded %d unlisted files", len(names))
                return []

        self._cancel_scheduled_clear()
        jobs = [VerificationJob(artifact) for artifact in batch]
        self.jobs.extend(jobs)
        self._pending.extend(jobs)
        for job in jobs:
            self.presenter.job_updated(job)
        logger.debug("Queued %d files", len(jobs))

        if not self.is_processing:
            self._worker = asyncio.create_task(self._process_queue())
        return jobs

    async def _process_queue(self) -> None:
        """Run pending jobs one at a time until none are left."""
        while self._pending:
            await self._run_job(self._pending.popleft())
        summary = self.summary()
        logger.info("Queue finished: %s", summary.message)
        self._schedule_clear()

    async def _run_job(self, job: VerificationJob) -> None:
        job.transition(JobStatus.PROCESSING)
        self.presenter.job_updated(job)
        # Checked against the manifest loaded when hashing started
        manifest = self._manifest
        token = self._scope.open(job.name)
        try:
            if manifest is None:
                msg = "manifest unloaded while files were queued"
                raise NoManifestLoadedError(msg, job.name)
            result = await self._verify(job, manifest, token)
        except OperationCancelled:
            logger.info("Verification of %s cancelled", job.name)
            job.result = JobResult(JobOutcome.CANCELLED)
            job.transition(JobStatus.COMPLETED)
        except VerifierError as e:
            logger.error("❌ %s", e)  # noqa: TRY400
            job.error = str(e)
            job.transition(JobStatus.ERROR)
        else:
            job.result = result
            job.transition(JobStatus.COMPLETED)
            self._record(job, result, manifest)
        finally:
            self._scope.close(token)
        self.presenter.job_updated(job)

    async def _verify(
        self,
        job: VerificationJob,
        manifest: ChecksumManifest,
        token: CancellationToken,
    ) -> JobResult:
        """Hash the job's file and classify the outcome."""

        def on_progress(state: ProgressState) -> None:
            job.progress = state
            self.presenter.progress(ProgressType.HASHING, job.name, state)

        entry = manifest.get(job.name)
        if entry is not None:
            digest = await self.engine.compute_digest(
                job.artifact, entry.algorithm, on_progress, token
            )
            if digest == entry.digest:
                return JobResult(
                    JobOutcome.VERIFIED,
                    entry.algorithm,
                    digest,
                    entry.digest,
                    entry.filename,
                )
            logger.warning(
                "❌ Checksum mismatch for %s: expected %s, got %s",
                job.name,
                entry.digest,
                digest,
            )
            return JobResult(
                JobOutcome.DIGEST_MISMATCH,
                entry.algorithm,
                digest,
                entry.digest,
            )

        # One pass covers every algorithm the manifest uses
        algorithms = manifest.algorithms or (DEFAULT_HASH_TYPE,)
        digests = await self.engine.compute_digests(
            job.artifact, algorithms, on_progress, token
        )
        match = manifest.find_by_digest(digests, exclude=job.name)
        if match is not None:
            logger.info(
                "%s matches manifest entry %s by content",
                job.name,
                match.filename,
            )
            return JobResult(
                JobOutcome.VERIFIED_BY_CONTENT,
                match.algorithm,
                digests[match.algorithm],
                match.digest,
                match.filename,
            )
        return JobResult(
            JobOutcome.FILENAME_MISMATCH,
            algorithms[0],
            digests[algorithms[0]],
        )

    def _record(
        self,
        job: VerificationJob,
        result: JobResult,
        manifest: ChecksumManifest,
    ) -> None:
        """Add a verified manifest entry to the verified file set."""
        if not result.outcome.is_success:
            return
        if self.verified.content_key != manifest.content_key:
            # The manifest changed while this file was hashed
            logger.debug("Not recording %s: manifest replaced", job.name)
            return
        self.verified.add(result.matched_name or job.name)
        self.presenter.manifest_changed(manifest, self.verified.snapshot())

    def cancel_current(self) -> bool:
        """Cancel the job being hashed; the queue moves on to the next one.

        Returns:
            True if a job was running

        """
        return self._scope.cancel()

    async def wait_idle(self) -> None:
        """Wait until every queued job has finished."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    def summary(self) -> QueueSummary:
        """Aggregate counts over the current jobs."""
        finished = [
            job
            for job in self.jobs
            if job.status in (JobStatus.COMPLETED, JobStatus.ERROR)
        ]
        outcomes = [job.result.outcome for job in finished if job.result]
        return QueueSummary(
            total=len(self.jobs),
            completed=len(finished),
            verified=sum(outcome.is_success for outcome in outcomes),
            mismatched=sum(
                outcome
                in (JobOutcome.DIGEST_MISMATCH, JobOutcome.FILENAME_MISMATCH)
                for outcome in outcomes
            ),
            cancelled=outcomes.count(JobOutcome.CANCELLED),
            errors=sum(job.status is JobStatus.ERROR for job in finished),
        )

    def _schedule_clear(self) -> None:
        """Clear finished jobs once the grace period has passed."""
        self._cancel_scheduled_clear()
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(
            self.settings["grace_period"], self.clear_finished
        )

    def _cancel_scheduled_clear(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    def clear_finished(self) -> None:
        """Drop finished jobs from the display list.

        The verified file set is not touched.
        """
        self._clear_handle = None
        self.jobs = [
            job
            for job in self.jobs
            if job.status in (JobStatus.PENDING, JobStatus.PROCESSING)
        ]
