"""Tests for the sequential verification queue."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from sigverify.core.checksum_parser import parse_manifest
from sigverify.core.hashing import HashEngine
from sigverify.core.protocols import NullPresenter, Presenter
from sigverify.core.queue import VerificationQueue
from sigverify.domain.types import JobOutcome, JobStatus, VerifiedFileSet
from sigverify.exceptions import NoManifestLoadedError


class RecordingPresenter(NullPresenter):
    """Presenter that records events and checks queue exclusivity."""

    def __init__(self, confirm: bool = True):  # noqa: FBT001, FBT002
        self.confirm = confirm
        self.queue = None
        self.started = []
        self.updates = []
        self.confirmations = []
        self.manifest_events = []
        self.on_progress = None

    def job_updated(self, job):
        self.updates.append((job.name, job.status))
        if job.status is JobStatus.PROCESSING:
            self.started.append(job.name)
        if self.queue is not None:
            processing = [
                j for j in self.queue.jobs if j.status is JobStatus.PROCESSING
            ]
            assert len(processing) <= 1

    def progress(self, progress_type, target, state):
        if self.on_progress is not None:
            self.on_progress(target, state)

    def manifest_changed(self, manifest, verified):
        self.manifest_events.append(verified)

    async def confirm_filename_mismatch(self, filenames, manifest_names):
        self.confirmations.append((list(filenames), list(manifest_names)))
        return self.confirm


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def settings(make_settings):
    return make_settings(
        hashing={
            "chunk_size": 1,
            "progress_interval": 1,
            "cancel_check_interval": 1,
        },
        queue={"grace_period": 60.0},
    )


@pytest.fixture
def queue(settings, presenter, manifest_text):
    queue = VerificationQueue(
        HashEngine(settings["hashing"]), presenter, settings["queue"]
    )
    presenter.queue = queue
    queue.set_manifest(parse_manifest(manifest_text, "SHA256SUMS"))
    return queue


async def run(queue, artifacts):
    jobs = await queue.enqueue(artifacts)
    await queue.wait_idle()
    return jobs


def test_presenter_protocol(presenter):
    assert isinstance(presenter, Presenter)


@pytest.mark.asyncio
async def test_requires_manifest(settings, artifact_for):
    queue = VerificationQueue(HashEngine(settings["hashing"]))
    with pytest.raises(NoManifestLoadedError):
        await queue.enqueue([artifact_for("foo.txt", b"foo")])
    assert queue.jobs == []


@pytest.mark.asyncio
async def test_empty_batch(queue):
    assert await queue.enqueue([]) == []


@pytest.mark.asyncio
async def test_jobs_run_in_order_one_at_a_time(
    queue, presenter, artifact_for
):
    artifacts = [
        artifact_for("foo.txt", b"foo"),
        artifact_for("bar.txt", b"bar"),
        artifact_for("foo.txt.bak", b"nothing"),
    ]
    jobs = await run(queue, artifacts)
    assert presenter.started == ["foo.txt", "bar.txt", "foo.txt.bak"]
    assert [job.status for job in jobs] == [JobStatus.COMPLETED] * 3
    assert [job.result.outcome for job in jobs] == [
        JobOutcome.VERIFIED,
        JobOutcome.VERIFIED,
        JobOutcome.FILENAME_MISMATCH,
    ]
    assert set(queue.verified) == {"foo.txt", "bar.txt"}
    assert presenter.confirmations == []


@pytest.mark.asyncio
async def test_second_batch_joins_running_queue(
    queue, presenter, artifact_for
):
    first = await queue.enqueue([artifact_for("foo.txt", b"foo")])
    second = await queue.enqueue([artifact_for("bar.txt", b"bar")])
    await queue.wait_idle()
    assert presenter.started == ["foo.txt", "bar.txt"]
    assert first[0].result.outcome is JobOutcome.VERIFIED
    assert second[0].result.outcome is JobOutcome.VERIFIED


@pytest.mark.asyncio
async def test_digest_mismatch(queue, artifact_for):
    (job,) = await run(queue, [artifact_for("foo.txt", b"tampered")])
    assert job.result.outcome is JobOutcome.DIGEST_MISMATCH
    assert job.result.expected_digest.startswith("2c26b46b")
    assert job.result.computed_digest != job.result.expected_digest
    assert "foo.txt" not in queue.verified


@pytest.mark.asyncio
async def test_renamed_file_verified_by_content(
    queue, presenter, artifact_for
):
    (job,) = await run(queue, [artifact_for("foo-renamed.txt", b"foo")])
    assert presenter.confirmations == [
        (["foo-renamed.txt"], ["foo.txt", "bar.txt"])
    ]
    assert job.result.outcome is JobOutcome.VERIFIED_BY_CONTENT
    assert job.result.matched_name == "foo.txt"
    assert "foo.txt" in queue.verified


@pytest.mark.asyncio
async def test_declined_batch_is_never_hashed(
    queue, presenter, artifact_for
):
    presenter.confirm = False
    queue.engine.compute_digests = AsyncMock()
    jobs = await run(
        queue,
        [artifact_for("x.iso", b"x"), artifact_for("y.iso", b"y")],
    )
    assert jobs == []
    assert queue.jobs == []
    queue.engine.compute_digests.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_current_job(queue, presenter, artifact_for):
    def cancel_foo(target, state):
        if target == "foo.txt":
            queue.cancel_current()

    presenter.on_progress = cancel_foo
    jobs = await run(
        queue,
        [artifact_for("foo.txt", b"foo"), artifact_for("bar.txt", b"bar")],
    )
    assert jobs[0].status is JobStatus.COMPLETED
    assert jobs[0].result.outcome is JobOutcome.CANCELLED
    assert jobs[1].result.outcome is JobOutcome.VERIFIED
    assert "foo.txt" not in queue.verified
    assert "bar.txt" in queue.verified


@pytest.mark.asyncio
async def test_cancel_when_idle(queue):
    assert queue.cancel_current() is False


@pytest.mark.asyncio
async def test_read_error_marks_job_and_continues(
    queue, artifact_for, tmp_path
):
    missing = artifact_for("foo.txt", b"foo")
    (tmp_path / "foo.txt").unlink()
    jobs = await run(queue, [missing, artifact_for("bar.txt", b"bar")])
    assert jobs[0].status is JobStatus.ERROR
    assert jobs[0].error
    assert jobs[1].result.outcome is JobOutcome.VERIFIED


@pytest.mark.asyncio
async def test_manifest_replaced_while_hashing(
    queue, presenter, artifact_for
):
    replacement = parse_manifest("f" * 64 + "  foo.txt\n", "OTHER")

    def swap_manifest(target, state):
        if queue.manifest is not replacement:
            queue.set_manifest(replacement)

    presenter.on_progress = swap_manifest
    (job,) = await run(queue, [artifact_for("foo.txt", b"foo")])
    # Checked against the manifest loaded when hashing started
    assert job.result.outcome is JobOutcome.VERIFIED
    assert len(queue.verified) == 0
    assert queue.verified.content_key == replacement.content_key


def test_same_manifest_content_keeps_verified_names(queue, manifest_text):
    queue.verified.add("foo.txt")
    cleared = queue.set_manifest(parse_manifest(manifest_text, "copy"))
    assert cleared is False
    assert "foo.txt" in queue.verified

    cleared = queue.set_manifest(parse_manifest(manifest_text + "\n#\n"))
    assert cleared is True
    assert len(queue.verified) == 0


@pytest.mark.asyncio
async def test_summary_counts(queue, artifact_for):
    await run(
        queue,
        [
            artifact_for("foo.txt", b"foo"),
            artifact_for("bar.txt", b"wrong"),
            artifact_for("other.txt", b"other"),
        ],
    )
    summary = queue.summary()
    assert summary.total == 3
    assert summary.completed == 3
    assert summary.verified == 1
    assert summary.mismatched == 2
    assert summary.errors == 0
    assert summary.message == "1 of 3 files verified"
    assert summary.to_dict()["message"] == summary.message


@pytest.mark.asyncio
async def test_finished_jobs_cleared_after_grace_period(
    make_settings, presenter, manifest_text, artifact_for
):
    settings = make_settings(queue={"grace_period": 0.05})
    verified = VerifiedFileSet()
    queue = VerificationQueue(
        HashEngine(settings["hashing"]),
        presenter,
        settings["queue"],
        verified,
    )
    queue.set_manifest(parse_manifest(manifest_text))
    await run(queue, [artifact_for("foo.txt", b"foo")])
    assert len(queue.jobs) == 1
    await asyncio.sleep(0.2)
    assert queue.jobs == []
    # Display list only; verified names stay
    assert "foo.txt" in verified


@pytest.mark.asyncio
async def test_new_batch_cancels_pending_clear(
    make_settings, presenter, manifest_text, artifact_for
):
    settings = make_settings(queue={"grace_period": 0.2})
    queue = VerificationQueue(
        HashEngine(settings["hashing"]), presenter, settings["queue"]
    )
    queue.set_manifest(parse_manifest(manifest_text))
    await run(queue, [artifact_for("foo.txt", b"foo")])
    await asyncio.sleep(0.1)
    await queue.enqueue([artifact_for("bar.txt", b"bar")])
    await asyncio.sleep(0.15)
    # The first clear would have fired by now
    assert [job.name for job in queue.jobs] == ["foo.txt", "bar.txt"]
    await queue.wait_idle()
