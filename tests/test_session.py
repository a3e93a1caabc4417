"""Tests for the verification session."""

import asyncio
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from sigverify.core import session as session_module
from sigverify.core.protocols import NullPresenter, ProgressType
from sigverify.core.session import VerificationSession
from sigverify.domain.types import JobOutcome, VerificationArtifact
from sigverify.exceptions import (
    BackendUnavailableError,
    InputFormatError,
    OperationCancelled,
)


class EventPresenter(NullPresenter):
    """Presenter that records signature events."""

    def __init__(self):
        self.progress_targets = []
        self.results = []
        self.on_progress = None

    def progress(self, progress_type, target, state):
        if progress_type is ProgressType.SIGNATURE:
            self.progress_targets.append(target)
        if self.on_progress is not None:
            self.on_progress(progress_type, state)

    def signature_checked(self, result):
        self.results.append(result)

    async def confirm_filename_mismatch(self, filenames, manifest_names):
        return True


@pytest.fixture
def presenter():
    return EventPresenter()


@pytest.fixture
def session(presenter):
    return VerificationSession(presenter=presenter)


@pytest_asyncio.fixture
async def keyed_session(session, rsa_key):
    await session.load_keys(
        VerificationArtifact.from_text(str(rsa_key.pubkey), "alice.asc")
    )
    return session


def test_missing_backend_is_fatal(monkeypatch):
    monkeypatch.setattr(
        session_module,
        "check_backends",
        MagicMock(side_effect=BackendUnavailableError("no sha512")),
    )
    with pytest.raises(BackendUnavailableError):
        VerificationSession()


def test_starts_empty(session):
    assert session.manifest is None
    assert len(session.keys) == 0
    assert session.last_signature is None
    assert session.cancel() is False


@pytest.mark.asyncio
async def test_load_keys_rejects_manifest(session, manifest_text):
    artifact = VerificationArtifact.from_text(manifest_text, "SHA256SUMS")
    with pytest.raises(InputFormatError) as exc_info:
        await session.load_keys(artifact)
    assert "--manifest" in exc_info.value.hint


@pytest.mark.asyncio
async def test_load_manifest(session, artifact_for, manifest_text):
    manifest = await session.load_manifest(
        artifact_for("SHA256SUMS", manifest_text)
    )
    assert session.manifest is manifest
    assert list(manifest) == ["foo.txt", "bar.txt"]


def test_manifest_text_without_checksums(session):
    with pytest.raises(InputFormatError, match="no checksum lines"):
        session.load_manifest_text("# only a comment\n")


@pytest.mark.asyncio
async def test_signed_manifest_is_loaded_and_used(
    keyed_session, presenter, rsa_key, clearsign, manifest_text, artifact_for
):
    signed = VerificationArtifact.from_text(
        clearsign(rsa_key, manifest_text), "SHA256SUMS.asc"
    )
    result = await keyed_session.verify_signature(signed)
    assert result.valid
    assert presenter.results == [result]
    assert keyed_session.last_signature is result
    assert set(keyed_session.manifest) == {"foo.txt", "bar.txt"}

    jobs = await keyed_session.enqueue_files(
        [artifact_for("foo.txt", b"foo"), artifact_for("bar.txt", b"bar")]
    )
    await keyed_session.wait_idle()
    assert [job.result.outcome for job in jobs] == [JobOutcome.VERIFIED] * 2
    assert set(keyed_session.verified) == {"foo.txt", "bar.txt"}


@pytest.mark.asyncio
async def test_plain_payload_loads_no_manifest(
    keyed_session, rsa_key, clearsign
):
    signed = VerificationArtifact.from_text(
        clearsign(rsa_key, "release notes\n"), "notes.asc"
    )
    result = await keyed_session.verify_signature(signed)
    assert result.valid
    assert keyed_session.manifest is None


@pytest.mark.asyncio
async def test_bad_signature_loads_no_manifest(
    keyed_session, other_key, clearsign, manifest_text
):
    signed = VerificationArtifact.from_text(
        clearsign(other_key, manifest_text), "SHA256SUMS.asc"
    )
    result = await keyed_session.verify_signature(signed)
    assert not result.valid
    assert keyed_session.manifest is None


@pytest.mark.asyncio
async def test_detached_manifest_is_loaded(
    keyed_session, rsa_key, manifest_text, artifact_for
):
    data = artifact_for("SHA256SUMS", manifest_text)
    signature = VerificationArtifact.from_bytes(
        bytes(rsa_key.sign(manifest_text.encode())), "SHA256SUMS.sig"
    )
    result = await keyed_session.verify_signature(signature, data)
    assert result.valid
    assert keyed_session.manifest.source_name == "SHA256SUMS"


@pytest.mark.asyncio
async def test_reloading_keys_clears_last_signature(
    keyed_session, rsa_key, clearsign
):
    signed = VerificationArtifact.from_text(
        clearsign(rsa_key, "hi\n"), "hi.asc"
    )
    await keyed_session.verify_signature(signed)
    await keyed_session.load_keys(
        VerificationArtifact.from_bytes(bytes(rsa_key.pubkey), "alice.gpg")
    )
    assert keyed_session.last_signature is None


@pytest.mark.asyncio
async def test_describe(keyed_session, rsa_key, clearsign):
    signed = VerificationArtifact.from_text(
        clearsign(rsa_key, "hi\n"), "hi.asc"
    )
    (text,) = await keyed_session.describe(signed)
    assert "Alice" in text


@pytest.mark.asyncio
async def test_cancel_signature_check(
    keyed_session, presenter, rsa_key, clearsign
):
    def cancel(progress_type, state):
        keyed_session.cancel()

    presenter.on_progress = cancel
    signed = VerificationArtifact.from_text(
        clearsign(rsa_key, "hi\n"), "hi.asc"
    )
    with pytest.raises(OperationCancelled):
        await keyed_session.verify_signature(signed)
    assert keyed_session.last_signature is None


@pytest.mark.asyncio
async def test_signature_checks_do_not_interleave(
    keyed_session, presenter, rsa_key, clearsign
):
    first = VerificationArtifact.from_text(
        clearsign(rsa_key, "one\n"), "one.asc"
    )
    second = VerificationArtifact.from_text(
        clearsign(rsa_key, "two\n"), "two.asc"
    )
    results = await asyncio.gather(
        keyed_session.verify_signature(first),
        keyed_session.verify_signature(second),
    )
    assert all(result.valid for result in results)
    targets = presenter.progress_targets
    switches = sum(a != b for a, b in zip(targets, targets[1:]))
    assert switches == 1
