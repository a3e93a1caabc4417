"""Domain types for verification.

This module contains pure domain types used by the verification engine
without any IO or infrastructure dependencies.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from sigverify.constants import HASH_LABELS, HASH_LENGTH_MAP, HashType
from sigverify.exceptions import InvalidTransitionError
from sigverify.utils.formatting import format_date, format_key_id

if TYPE_CHECKING:
    from collections.abc import Iterator


class ArtifactKind(Enum):
    """Kinds of artifact the classifier can recognize."""

    PUBLIC_KEY = "public_key"
    CLEAR_SIGNED = "clear_signed"
    INLINE_SIGNED = "inline_signed"
    DETACHED_SIGNATURE_ARMORED = "detached_signature_armored"
    DETACHED_SIGNATURE_BINARY = "detached_signature_binary"
    CHECKSUM_MANIFEST = "checksum_manifest"
    PLAIN_DATA = "plain_data"
    UNKNOWN = "unknown"

    @property
    def is_detached_signature(self) -> bool:
        """Whether the artifact is a signature without its payload."""
        return self in (
            ArtifactKind.DETACHED_SIGNATURE_ARMORED,
            ArtifactKind.DETACHED_SIGNATURE_BINARY,
        )

    @property
    def is_inline_signed(self) -> bool:
        """Whether payload and signature travel together."""
        return self in (ArtifactKind.CLEAR_SIGNED, ArtifactKind.INLINE_SIGNED)

    @property
    def label(self) -> str:
        """Human-readable name."""
        return _KIND_LABELS[self]


_KIND_LABELS: dict[ArtifactKind, str] = {
    ArtifactKind.PUBLIC_KEY: "public key",
    ArtifactKind.CLEAR_SIGNED: "clearsigned message",
    ArtifactKind.INLINE_SIGNED: "signed message",
    ArtifactKind.DETACHED_SIGNATURE_ARMORED: "detached signature (armored)",
    ArtifactKind.DETACHED_SIGNATURE_BINARY: "detached signature (binary)",
    ArtifactKind.CHECKSUM_MANIFEST: "checksum manifest",
    ArtifactKind.PLAIN_DATA: "plain data",
    ArtifactKind.UNKNOWN: "unknown data",
}


class Slot(Enum):
    """Input slots a user can put an artifact into."""

    KEY = "key"
    SIGNED = "signed"
    DATA = "data"
    MANIFEST = "manifest"


@dataclass(frozen=True, slots=True)
class VerificationArtifact:
    """An input to verification, backed by a file or an in-memory buffer.

    Exactly one of ``path`` and ``content`` is set. Artifacts are never
    mutated; ``with_kind`` returns a classified copy.
    """

    name: str
    size: int
    path: Path | None = None
    content: bytes | None = field(default=None, repr=False)
    kind: ArtifactKind = ArtifactKind.UNKNOWN

    def __post_init__(self) -> None:
        """Check that exactly one content reference is present."""
        if (self.path is None) == (self.content is None):
            msg = "VerificationArtifact needs exactly one of path or content"
            raise ValueError(msg)

    @classmethod
    def from_path(cls, path: Path, size: int | None = None) -> Self:
        """Create an artifact referencing a file on disk."""
        return cls(
            name=path.name,
            size=path.stat().st_size if size is None else size,
            path=path,
        )

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "<input>") -> Self:
        """Create an artifact from an in-memory buffer."""
        return cls(name=name, size=len(data), content=bytes(data))

    @classmethod
    def from_text(cls, text: str, name: str = "<pasted text>") -> Self:
        """Create an artifact from pasted text (encoded as UTF-8)."""
        return cls.from_bytes(text.encode("utf-8"), name=name)

    def with_kind(self, kind: ArtifactKind) -> VerificationArtifact:
        """Return a copy tagged with a classified kind."""
        return replace(self, kind=kind)


class JobStatus(Enum):
    """Lifecycle of a queued verification job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


_ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.ERROR}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.ERROR: frozenset(),
}


class JobOutcome(Enum):
    """Result of checking one file against the manifest."""

    VERIFIED = "verified"
    VERIFIED_BY_CONTENT = "verified_by_content"
    DIGEST_MISMATCH = "digest_mismatch"
    FILENAME_MISMATCH = "filename_mismatch"
    CANCELLED = "cancelled"

    @property
    def is_success(self) -> bool:
        """Whether the file content is confirmed by the manifest."""
        return self in (JobOutcome.VERIFIED, JobOutcome.VERIFIED_BY_CONTENT)


@dataclass(frozen=True, slots=True)
class ProgressState:
    """Progress of one operation, percent in [0, 100]."""

    percent: float
    message: str

    def __post_init__(self) -> None:
        """Reject percentages outside [0, 100]."""
        if not 0 <= self.percent <= 100:  # noqa: PLR2004
            msg = f"percent must be within [0, 100], got {self.percent}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class JobResult:
    """Outcome of a completed queue job."""

    outcome: JobOutcome
    algorithm: HashType | None = None
    computed_digest: str | None = None
    expected_digest: str | None = None
    matched_name: str | None = None

    @property
    def message(self) -> str:
        """Status text for display."""
        match self.outcome:
            case JobOutcome.VERIFIED:
                return "VERIFIED"
            case JobOutcome.VERIFIED_BY_CONTENT:
                return f"VERIFIED (content matches {self.matched_name})"
            case JobOutcome.DIGEST_MISMATCH:
                return "CHECKSUM MISMATCH"
            case JobOutcome.FILENAME_MISMATCH:
                return "FILENAME MISMATCH"
            case _:
                return "CANCELLED"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "outcome": self.outcome.value,
            "message": self.message,
            "algorithm": self.algorithm,
            "computed_digest": self.computed_digest,
            "expected_digest": self.expected_digest,
            "matched_name": self.matched_name,
        }


@dataclass(slots=True)
class VerificationJob:
    """One file waiting for or undergoing checksum verification."""

    artifact: VerificationArtifact
    status: JobStatus = JobStatus.PENDING
    result: JobResult | None = None
    error: str | None = None
    progress: ProgressState = field(
        default_factory=lambda: ProgressState(0, "Waiting...")
    )

    @property
    def name(self) -> str:
        """Filename of the artifact being verified."""
        return self.artifact.name

    def transition(self, status: JobStatus) -> None:
        """Move to ``status``, enforcing Pending→Processing→Completed|Error.

        Raises:
            InvalidTransitionError: For any other transition

        """
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            msg = f"{self.status.value} -> {status.value}"
            raise InvalidTransitionError(msg, self.name)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.name,
            "size": self.artifact.size,
            "status": self.status.value,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class ChecksumEntry:
    """One manifest line: a filename and its expected digest."""

    filename: str
    digest: str
    algorithm: HashType

    def __post_init__(self) -> None:
        """Check the algorithm agrees with the digest length."""
        expected = HASH_LENGTH_MAP.get(len(self.digest))
        if expected != self.algorithm:
            msg = (
                f"digest of length {len(self.digest)} cannot be "
                f"{self.algorithm}"
            )
            raise ValueError(msg)


@dataclass(frozen=True)
class ChecksumManifest:
    """Parsed checksum manifest: filename → ChecksumEntry.

    ``content_key`` is the SHA-256 of the manifest source text; two
    manifests with the same key came from identical content.
    """

    entries: dict[str, ChecksumEntry]
    content_key: str
    source_name: str = "<manifest>"

    @staticmethod
    def content_key_for(text: str) -> str:
        """Return the content key for manifest source text."""
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def __contains__(self, filename: object) -> bool:
        """Whether the manifest lists ``filename``."""
        return filename in self.entries

    def __len__(self) -> int:
        """Number of distinct filenames."""
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        """Iterate filenames in source order."""
        return iter(self.entries)

    def get(self, filename: str) -> ChecksumEntry | None:
        """Return the entry for ``filename``, if any."""
        return self.entries.get(filename)

    @property
    def algorithms(self) -> tuple[HashType, ...]:
        """Distinct algorithms used by the entries, in first-seen order."""
        return tuple(
            dict.fromkeys(entry.algorithm for entry in self.entries.values())
        )

    @property
    def algorithm_label(self) -> str:
        """Display label for the first entry's algorithm."""
        for entry in self.entries.values():
            return HASH_LABELS.get(entry.algorithm, "Unknown")
        return "Unknown"

    def find_by_digest(
        self, digests: dict[str, str], exclude: str | None = None
    ) -> ChecksumEntry | None:
        """Find an entry whose digest equals a computed digest.

        Args:
            digests: Computed hex digests keyed by algorithm
            exclude: Filename to skip

        Returns:
            First matching entry in source order, or None

        """
        for entry in self.entries.values():
            if entry.filename == exclude:
                continue
            if digests.get(entry.algorithm) == entry.digest:
                return entry
        return None

    def to_mapping(self) -> dict[str, dict[str, str]]:
        """Return filename → {digest, algorithm}."""
        return {
            name: {"digest": entry.digest, "algorithm": entry.algorithm}
            for name, entry in self.entries.items()
        }

    def to_text(self) -> str:
        """Serialize in the BSD ``ALGO (<filename>) = <digest>`` form.

        The parenthesized name keeps a leading ``*`` or ``= `` intact when
        the text is parsed again.
        """
        return "".join(
            f"{entry.algorithm.upper()} ({entry.filename}) = {entry.digest}\n"
            for entry in self.entries.values()
        )


class VerifiedFileSet:
    """Filenames confirmed against the currently loaded manifest.

    The set is keyed by manifest content: rebinding to a manifest with a
    different content key clears it, rebinding to identical content keeps
    it.
    """

    def __init__(self) -> None:
        """Create an empty set bound to no manifest."""
        self._content_key: str | None = None
        self._names: set[str] = set()

    @property
    def content_key(self) -> str | None:
        """Content key of the manifest the names were verified against."""
        return self._content_key

    def bind(self, content_key: str) -> bool:
        """Bind to a manifest content key.

        Returns:
            True if the set was cleared because the content changed

        """
        if content_key == self._content_key:
            return False
        self._content_key = content_key
        cleared = bool(self._names)
        self._names.clear()
        return cleared

    def add(self, filename: str) -> None:
        """Record a verified filename."""
        self._names.add(filename)

    def __contains__(self, filename: object) -> bool:
        """Whether ``filename`` has been verified."""
        return filename in self._names

    def __len__(self) -> int:
        """Number of verified filenames."""
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        """Iterate verified filenames in sorted order."""
        return iter(sorted(self._names))

    def snapshot(self) -> frozenset[str]:
        """Return an immutable copy of the verified names."""
        return frozenset(self._names)


@dataclass(frozen=True, slots=True)
class KeyInfo:
    """Identity of one loaded public key."""

    key_id: str
    fingerprint: str
    created: datetime | None
    user_ids: tuple[str, ...] = ()
    subkey_ids: tuple[str, ...] = ()

    @property
    def primary_user_id(self) -> str:
        """First identity string, or a placeholder."""
        return self.user_ids[0] if self.user_ids else "Unknown"

    @property
    def summary(self) -> str:
        """``Name <email> (Created: YYYY-MM-DD, ID: KEYID)``."""
        return (
            f"{self.primary_user_id} (Created: {format_date(self.created)}, "
            f"ID: {format_key_id(self.key_id)})"
        )

    def matches(self, key_id: str | None) -> bool:
        """Whether ``key_id`` is this key or one of its subkeys."""
        if not key_id:
            return False
        wanted = format_key_id(key_id)
        return wanted == format_key_id(self.key_id) or wanted in {
            format_key_id(sub) for sub in self.subkey_ids
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "key_id": format_key_id(self.key_id),
            "fingerprint": self.fingerprint,
            "created": self.created.isoformat() if self.created else None,
            "user_ids": list(self.user_ids),
            "subkey_ids": [format_key_id(sub) for sub in self.subkey_ids],
        }


@dataclass(frozen=True, slots=True)
class SignatureInfo:
    """Metadata declared by a signature before any verification."""

    issuer_key_id: str | None
    created: datetime | None
    hash_algorithm: str
    key_algorithm: str
    is_text: bool = False


class VerificationMode(Enum):
    """How payload and signature were supplied."""

    INLINE = "inline"
    DETACHED = "detached"
    DETACHED_STREAM = "detached_stream"


@dataclass(frozen=True, slots=True)
class SignatureResult:
    """Outcome of one signature verification.

    ``valid`` False is a verification failure, a result rather than an
    error. ``payload`` holds the verified text when there is one (the
    clearsigned body, inline literal data or a small text payload).
    """

    valid: bool
    signer_key_id: str | None
    signing_time: datetime | None
    mode: VerificationMode
    signer: KeyInfo | None = None
    hash_algorithm: str | None = None
    payload: str | None = field(default=None, repr=False)
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "valid": self.valid,
            "signer_key_id": format_key_id(self.signer_key_id),
            "signing_time": self.signing_time.isoformat()
            if self.signing_time
            else None,
            "mode": self.mode.value,
            "signer": self.signer.to_dict() if self.signer else None,
            "hash_algorithm": self.hash_algorithm,
            "reason": self.reason,
        }
