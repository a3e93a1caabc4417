"""Verification session: the state of one user's verification work.

A session owns the loaded keys, the loaded manifest (through its queue),
the verified file set and the services that act on them. Callers create
one per run and pass it around instead of sharing module-level state.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from sigverify.config import Settings, default_settings
from sigverify.core.cancellation import CancellationScope
from sigverify.core.checksum_parser import contains_checksums, parse_manifest
from sigverify.core.classifier import classify_artifact, ensure_slot
from sigverify.core.hashing import HashEngine, check_backends
from sigverify.core.io import read_all
from sigverify.core.protocols.presenter import NullPresenter
from sigverify.core.protocols.progress import ProgressType
from sigverify.core.queue import VerificationQueue
from sigverify.core.signature import (
    KeyMaterial,
    PGPyBackend,
    SignaturePipeline,
    describe_signature,
)
from sigverify.domain.types import Slot, VerifiedFileSet
from sigverify.exceptions import InputFormatError
from sigverify.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sigverify.core.protocols.presenter import Presenter
    from sigverify.core.signature import CryptoBackend
    from sigverify.domain.types import (
        ChecksumManifest,
        KeyInfo,
        ProgressState,
        SignatureResult,
        VerificationArtifact,
        VerificationJob,
    )

logger = get_logger(__name__)


class VerificationSession:
    """Keys, manifest and verification services for one session."""

    def __init__(
        self,
        settings: Settings | None = None,
        presenter: Presenter | None = None,
        crypto: CryptoBackend | None = None,
    ) -> None:
        """Create a session.

        Args:
            settings: Application settings (defaults when omitted)
            presenter: Receiver of engine events
            crypto: Cryptography collaborator (PGPy when omitted)

        Raises:
            BackendUnavailableError: If a required hashing backend is
                missing. The session cannot operate at all in that case.

        """
        check_backends()
        self.settings = settings or default_settings()
        self.presenter = presenter or NullPresenter()
        self.crypto = crypto or PGPyBackend()
        self.keys = KeyMaterial(self.crypto)
        self.verified = VerifiedFileSet()
        self.engine = HashEngine(self.settings["hashing"])
        self.pipeline = SignaturePipeline(
            self.crypto, self.settings["signature"]
        )
        self.queue = VerificationQueue(
            self.engine,
            self.presenter,
            self.settings["queue"],
            self.verified,
        )
        self._signature_lock = asyncio.Lock()
        self._signature_scope = CancellationScope()
        self.last_signature: SignatureResult | None = None

    @property
    def manifest(self) -> ChecksumManifest | None:
        """Currently loaded checksum manifest."""
        return self.queue.manifest

    async def load_keys(self, artifact: VerificationArtifact) -> list[KeyInfo]:
        """Replace the loaded keys with those in ``artifact``.

        Raises:
            InputFormatError: If the artifact is not a public key
            KeyParseError: If the key cannot be read

        """
        classification = await classify_artifact(artifact)
        ensure_slot(classification, Slot.KEY, artifact.name)
        data = await read_all(artifact)
        infos = self.keys.load(data, artifact.name)
        self.last_signature = None
        return infos

    async def load_manifest(
        self, artifact: VerificationArtifact
    ) -> ChecksumManifest:
        """Load a checksum manifest file.

        Raises:
            InputFormatError: If the artifact is not a manifest

        """
        classification = await classify_artifact(artifact)
        ensure_slot(classification, Slot.MANIFEST, artifact.name)
        data = await read_all(artifact)
        text = data.decode("utf-8", errors="replace")
        return self.load_manifest_text(text, artifact.name)

    def load_manifest_text(
        self, text: str, source_name: str = "<manifest>"
    ) -> ChecksumManifest:
        """Parse manifest text and make it the session's manifest.

        Raises:
            InputFormatError: If the text holds no checksum line

        """
        manifest = parse_manifest(text, source_name)
        if not len(manifest):
            msg = "no checksum lines found"
            raise InputFormatError(msg, source_name)
        self.queue.set_manifest(manifest)
        logger.info(
            "Loaded %d %s checksums from %s",
            len(manifest),
            manifest.algorithm_label,
            source_name,
        )
        return manifest

    async def describe(self, artifact: VerificationArtifact) -> list[str]:
        """Describe each signature on ``artifact`` against loaded keys."""
        infos = await self.pipeline.inspect(artifact)
        return [describe_signature(self.keys, info) for info in infos]

    async def verify_signature(
        self,
        artifact: VerificationArtifact,
        data_artifact: VerificationArtifact | None = None,
    ) -> SignatureResult:
        """Verify a signed artifact with the loaded keys.

        Only one verification runs at a time; a second call waits. When
        the verified payload is a checksum manifest it becomes the
        session's manifest.

        Raises:
            OperationCancelled: If cancel() was called meanwhile

        """
        target = artifact.name

        def on_progress(state: ProgressState) -> None:
            self.presenter.progress(ProgressType.SIGNATURE, target, state)

        async with self._signature_lock:
            token = self._signature_scope.open(target)
            try:
                result = await self.pipeline.verify(
                    self.keys, artifact, data_artifact, on_progress, token
                )
            finally:
                self._signature_scope.close(token)

        self.last_signature = result
        self.presenter.signature_checked(result)

        if result.valid and result.payload:
            if contains_checksums(result.payload):
                source = data_artifact.name if data_artifact else target
                self.load_manifest_text(result.payload, source)
        return result

    async def enqueue_files(
        self, artifacts: Iterable[VerificationArtifact]
    ) -> list[VerificationJob]:
        """Queue files for checksum verification."""
        return await self.queue.enqueue(artifacts)

    async def wait_idle(self) -> None:
        """Wait for every queued file to finish."""
        await self.queue.wait_idle()

    def cancel(self) -> bool:
        """Cancel the running signature check and hashing job.

        Returns:
            True if anything was running

        """
        signature = self._signature_scope.cancel()
        job = self.queue.cancel_current()
        return signature or job
