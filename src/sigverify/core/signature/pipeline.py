"""Signature verification pipeline.

Two modes are supported:

- Inline: a clearsigned or inline-signed message carries payload and
  signature together and is verified as one unit.
- Detached: signature and data are separate artifacts. Small payloads
  are tried as text first, since a signed payload is often a checksum
  manifest that must be read after verification. Larger or binary
  payloads are drained through a pull-based chunk source into the
  backend's stream verifier, and the result is only read once every
  chunk has been consumed.

The pipeline resolves which loaded key issued a signature and reports
progress; the accept/reject decision belongs to the CryptoBackend.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from typing import TYPE_CHECKING

from sigverify.config import SignatureSettings, default_settings
from sigverify.constants import (
    SIGNATURE_DRAIN_PROGRESS_CAP,
    STAGE_CHECK,
    STAGE_CHECK_SIGNATURE,
    STAGE_COMPLETE,
    STAGE_FILE_READ,
    STAGE_FINALIZE,
    STAGE_INIT,
    STAGE_PARSE,
    STAGE_VERIFY,
    TEXT_NUL_SCAN_CHARS,
)
from sigverify.core.classifier import classify_artifact, ensure_slot
from sigverify.core.io import iter_chunks, read_all
from sigverify.core.protocols.progress import ProgressTracker
from sigverify.domain.types import (
    ArtifactKind,
    SignatureResult,
    Slot,
    VerificationArtifact,
    VerificationMode,
)
from sigverify.exceptions import InputFormatError, KeyParseError
from sigverify.logger import get_logger
from sigverify.utils.formatting import format_bytes, format_date, format_key_id

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sigverify.core.cancellation import CancellationToken
    from sigverify.core.protocols.progress import ProgressCallback
    from sigverify.core.signature.backend import (
        CryptoBackend,
        ParsedKey,
        ParsedSignature,
    )
    from sigverify.core.signature.keyring import KeyMaterial
    from sigverify.domain.types import SignatureInfo

logger = get_logger(__name__)

REASON_NO_MATCHING_KEY = "no loaded key matches signer"
REASON_BAD_SIGNATURE = "signature does not match the signed data"


def decode_text(data: bytes) -> str | None:
    """Decode a payload as UTF-8 text, or None if it looks binary.

    A payload is binary when it is not valid UTF-8 or when a NUL
    character appears within the first TEXT_NUL_SCAN_CHARS characters.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if "\x00" in text[:TEXT_NUL_SCAN_CHARS]:
        return None
    return text


def _checkpoint(token: CancellationToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


def resolve_signer(
    keys: KeyMaterial, signatures: Sequence[SignatureInfo]
) -> tuple[SignatureInfo, ParsedKey | None]:
    """Pick the first signature whose issuer is a loaded key.

    Returns:
        The chosen signature and its key, or the first signature and
        None when no issuer is loaded

    """
    for info in signatures:
        key = keys.find(info.issuer_key_id)
        if key is not None:
            return info, key
    return signatures[0], None


def describe_signature(keys: KeyMaterial, info: SignatureInfo) -> str:
    """Summarize what a signature declares, before verifying it.

    Example:
        Issuer: 0123456789ABCDEF
        Created: 2024-05-01
        Hash: SHA256
        Signer: Alice <alice@example.com> (Created: 2023-01-09, ID: ...)

    """
    lines = [
        f"Issuer: {format_key_id(info.issuer_key_id)}",
        f"Created: {format_date(info.created)}",
        f"Hash: {info.hash_algorithm}",
    ]
    key = keys.find(info.issuer_key_id)
    if key is None:
        lines.append("Signer: no loaded key matches this signature")
    else:
        lines.append(f"Signer: {key.info.summary}")
    return "\n".join(lines)


class SignaturePipeline:
    """Orchestrates inline and detached signature verification."""

    def __init__(
        self,
        backend: CryptoBackend,
        settings: SignatureSettings | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            backend: Cryptography collaborator
            settings: Signature settings (defaults when omitted)

        """
        self.backend = backend
        self.settings = settings or default_settings()["signature"]

    async def _kind(self, artifact: VerificationArtifact) -> ArtifactKind:
        kind = artifact.kind
        if kind is ArtifactKind.UNKNOWN:
            classification = await classify_artifact(artifact)
            ensure_slot(classification, Slot.SIGNED, artifact.name)
            kind = classification.kind
        elif not (kind.is_inline_signed or kind.is_detached_signature):
            msg = f"expected a signed artifact, got {kind.label}"
            raise InputFormatError(msg, artifact.name)
        return kind

    async def inspect(
        self, artifact: VerificationArtifact
    ) -> list[SignatureInfo]:
        """Read the signatures an artifact declares without verifying.

        Raises:
            InputFormatError: If the artifact is not signed
            SignatureParseError: If it cannot be parsed

        """
        kind = await self._kind(artifact)
        data = await read_all(artifact)
        if kind.is_inline_signed:
            message = self.backend.parse_message(data, artifact.name)
            return list(message.signatures)
        return [self.backend.parse_signature(data, artifact.name).info]

    async def verify(
        self,
        keys: KeyMaterial,
        artifact: VerificationArtifact,
        data_artifact: VerificationArtifact | None = None,
        on_progress: ProgressCallback | None = None,
        token: CancellationToken | None = None,
    ) -> SignatureResult:
        """Verify a signed artifact against the loaded keys.

        Args:
            keys: Loaded public keys
            artifact: Clearsigned/inline message or detached signature
            data_artifact: Signed data, required for detached signatures
            on_progress: Optional progress callback
            token: Optional cancellation token

        Returns:
            The verification result. ``valid`` False is a result, not an
            error.

        Raises:
            KeyParseError: If no key is loaded
            InputFormatError: If the artifact is not signed, or a detached
                signature has no data
            SignatureParseError: If the signature cannot be parsed
            ArtifactReadError: If reading fails
            OperationCancelled: If the token was cancelled

        """
        tracker = ProgressTracker(
            on_progress,
            interval=self.settings["progress_interval"],
            cap=SIGNATURE_DRAIN_PROGRESS_CAP,
        )
        tracker.emit(*STAGE_INIT)
        if not len(keys):
            msg = "no public key loaded"
            raise KeyParseError(msg, artifact.name)

        kind = await self._kind(artifact)
        _checkpoint(token)

        if kind.is_inline_signed:
            if data_artifact is not None:
                logger.warning(
                    "Ignoring %s: %s carries its own payload",
                    data_artifact.name,
                    artifact.name,
                )
            result = await self._verify_inline(keys, artifact, tracker, token)
        else:
            if data_artifact is None:
                msg = "a detached signature needs the data it signs"
                raise InputFormatError(
                    msg, artifact.name, "Supply the signed file (--data)."
                )
            result = await self._verify_detached(
                keys, artifact, data_artifact, tracker, token
            )

        tracker.emit(*STAGE_COMPLETE)
        if result.valid:
            logger.info(
                "✅ Valid signature from %s",
                result.signer.summary if result.signer else "unknown key",
            )
        else:
            logger.warning(
                "❌ Signature on %s is not valid: %s",
                artifact.name,
                result.reason,
            )
        return result

    async def _verify_inline(
        self,
        keys: KeyMaterial,
        artifact: VerificationArtifact,
        tracker: ProgressTracker,
        token: CancellationToken | None,
    ) -> SignatureResult:
        tracker.emit(*STAGE_FILE_READ)
        data = await read_all(artifact)
        _checkpoint(token)

        tracker.emit(*STAGE_PARSE)
        message = self.backend.parse_message(data, artifact.name)
        await asyncio.sleep(0)
        _checkpoint(token)

        info, key = resolve_signer(keys, message.signatures)
        if key is None:
            return self._unmatched(info, VerificationMode.INLINE)

        tracker.emit(*STAGE_VERIFY)
        valid = self.backend.verify_message(key, message)
        await asyncio.sleep(0)
        _checkpoint(token)

        tracker.emit(*STAGE_CHECK)
        payload = message.payload
        if isinstance(payload, bytes):
            payload = decode_text(payload)
        return self._result(
            valid, info, key, VerificationMode.INLINE, payload
        )

    async def _verify_detached(
        self,
        keys: KeyMaterial,
        artifact: VerificationArtifact,
        data_artifact: VerificationArtifact,
        tracker: ProgressTracker,
        token: CancellationToken | None,
    ) -> SignatureResult:
        tracker.emit(*STAGE_FILE_READ)
        signature_data = await read_all(artifact)
        _checkpoint(token)

        tracker.emit(*STAGE_PARSE)
        signature = self.backend.parse_signature(signature_data, artifact.name)
        key = keys.find(signature.info.issuer_key_id)
        if key is None:
            return self._unmatched(signature.info, VerificationMode.DETACHED)

        source = data_artifact
        if data_artifact.size < self.settings["text_threshold"]:
            raw = await read_all(data_artifact)
            _checkpoint(token)
            text = decode_text(raw)
            if text is not None:
                tracker.emit(*STAGE_VERIFY)
                valid = self.backend.verify_detached(key, signature, raw)
                await asyncio.sleep(0)
                _checkpoint(token)
                tracker.emit(*STAGE_CHECK)
                return self._result(
                    valid,
                    signature.info,
                    key,
                    VerificationMode.DETACHED,
                    text,
                )
            # Already in memory; stream from the buffer instead of re-reading
            source = VerificationArtifact.from_bytes(raw, data_artifact.name)

        valid = await self._drain(key, signature, source, tracker, token)
        return self._result(
            valid, signature.info, key, VerificationMode.DETACHED_STREAM
        )

    async def _drain(
        self,
        key: ParsedKey,
        signature: ParsedSignature,
        source: VerificationArtifact,
        tracker: ProgressTracker,
        token: CancellationToken | None,
    ) -> bool:
        """Feed the whole payload to a stream verifier, then finalize.

        The token is checked before every chunk is consumed. A cancelled
        drain raises before finalize(), so a partial drain never produces
        a result.
        """
        tracker.emit(*STAGE_VERIFY)
        verifier = self.backend.open_stream(key, signature)
        total = source.size
        processed = 0
        logger.debug(
            "Streaming %s (%s) through signature verifier",
            source.name,
            format_bytes(total),
        )

        async with aclosing(
            iter_chunks(source, self.settings["stream_chunk_size"])
        ) as chunks:
            async for chunk in chunks:
                _checkpoint(token)
                verifier.update(chunk)
                processed += len(chunk)
                tracker.advance(
                    processed,
                    total,
                    f"Verifying {source.name}: "
                    f"{format_bytes(processed)} / {format_bytes(total)}",
                    start=STAGE_VERIFY[0],
                )
        _checkpoint(token)

        tracker.emit(*STAGE_FINALIZE)
        valid = verifier.finalize()
        tracker.emit(*STAGE_CHECK_SIGNATURE)
        return valid

    @staticmethod
    def _result(
        valid: bool,  # noqa: FBT001
        info: SignatureInfo,
        key: ParsedKey,
        mode: VerificationMode,
        payload: str | None = None,
    ) -> SignatureResult:
        return SignatureResult(
            valid=valid,
            signer_key_id=info.issuer_key_id,
            signing_time=info.created,
            mode=mode,
            signer=key.info,
            hash_algorithm=info.hash_algorithm,
            payload=payload if valid else None,
            reason=None if valid else REASON_BAD_SIGNATURE,
        )

    @staticmethod
    def _unmatched(
        info: SignatureInfo, mode: VerificationMode
    ) -> SignatureResult:
        logger.warning(
            "No loaded key matches issuer %s",
            format_key_id(info.issuer_key_id),
        )
        return SignatureResult(
            valid=False,
            signer_key_id=info.issuer_key_id,
            signing_time=info.created,
            mode=mode,
            hash_algorithm=info.hash_algorithm,
            reason=REASON_NO_MATCHING_KEY,
        )
