"""Chunked digest computation over files of any size.

Content is read in bounded chunks and fed to one incremental hasher per
requested algorithm, so peak memory is one chunk regardless of file size
and several algorithms cost a single pass over the data.

Two hashing backends are available. ``hashlib`` (OpenSSL) is preferred;
``cryptography`` is the portable fallback used when hashlib cannot build
an algorithm (for example MD5 on a FIPS-restricted OpenSSL). Both produce
identical digests, so the choice never changes a result.
"""

from __future__ import annotations

import hashlib
from contextlib import aclosing
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes

from sigverify.config import HashingSettings, default_settings
from sigverify.constants import (
    DEFAULT_HASH_TYPE,
    HASH_BACKEND_AUTO,
    HASH_BACKEND_CRYPTOGRAPHY,
    HASH_BACKEND_HASHLIB,
    HASH_PROGRESS_CAP,
    SUPPORTED_HASH_ALGORITHMS,
    HashType,
)
from sigverify.core.io import iter_chunks
from sigverify.core.protocols.progress import ProgressTracker
from sigverify.domain.types import VerificationArtifact
from sigverify.exceptions import BackendUnavailableError
from sigverify.logger import get_logger
from sigverify.utils.formatting import format_bytes

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sigverify.core.cancellation import CancellationToken
    from sigverify.core.protocols.progress import ProgressCallback

logger = get_logger(__name__)


class Hasher(Protocol):
    """Incremental hash object."""

    def update(self, data: bytes) -> None:
        """Feed more data."""
        ...

    def hexdigest(self) -> str:
        """Return the lowercase hex digest of everything fed so far."""
        ...


class HashBackend(Protocol):
    """Factory of incremental hashers."""

    name: str

    def supports(self, algorithm: HashType) -> bool:
        """Whether this backend can compute ``algorithm`` here."""
        ...

    def new(self, algorithm: HashType) -> Hasher:
        """Create a fresh hasher for ``algorithm``."""
        ...


class HashlibBackend:
    """OpenSSL-backed hashing through hashlib."""

    name = HASH_BACKEND_HASHLIB

    def supports(self, algorithm: HashType) -> bool:
        """Probe hashlib for the algorithm."""
        try:
            self.new(algorithm)
        except ValueError:
            return False
        return True

    def new(self, algorithm: HashType) -> Hasher:
        """Create a hashlib hasher.

        Digests here detect corruption rather than provide security, so
        usedforsecurity=False keeps MD5 available under FIPS policies.
        """
        return hashlib.new(algorithm, usedforsecurity=False)


_CRYPTOGRAPHY_ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
    "sha512": hashes.SHA512,
}


class _CryptographyHasher:
    """Adapter giving cryptography's Hash a hashlib-style interface."""

    __slots__ = ("_context", "_digest")

    def __init__(self, algorithm: hashes.HashAlgorithm) -> None:
        self._context = hashes.Hash(algorithm)
        self._digest: str | None = None

    def update(self, data: bytes) -> None:
        self._context.update(data)

    def hexdigest(self) -> str:
        if self._digest is None:
            self._digest = self._context.finalize().hex()
        return self._digest


class CryptographyBackend:
    """Portable hashing through cryptography's hash primitives."""

    name = HASH_BACKEND_CRYPTOGRAPHY

    def supports(self, algorithm: HashType) -> bool:
        """Probe cryptography for the algorithm."""
        if algorithm not in _CRYPTOGRAPHY_ALGORITHMS:
            return False
        try:
            self.new(algorithm)
        except UnsupportedAlgorithm:
            return False
        return True

    def new(self, algorithm: HashType) -> Hasher:
        """Create a cryptography-backed hasher."""
        return _CryptographyHasher(_CRYPTOGRAPHY_ALGORITHMS[algorithm]())


BACKENDS: dict[str, HashBackend] = {
    HASH_BACKEND_HASHLIB: HashlibBackend(),
    HASH_BACKEND_CRYPTOGRAPHY: CryptographyBackend(),
}

# Preference order for "auto"
_AUTO_ORDER: tuple[str, ...] = (
    HASH_BACKEND_HASHLIB,
    HASH_BACKEND_CRYPTOGRAPHY,
)


def select_backend(
    algorithm: HashType, preferred: str = HASH_BACKEND_AUTO
) -> HashBackend:
    """Return the backend to use for ``algorithm``.

    Args:
        algorithm: Hash algorithm name
        preferred: "auto" for the fastest available backend, or the name
            of a backend to force

    Raises:
        BackendUnavailableError: If no allowed backend supports the
            algorithm

    """
    if algorithm not in SUPPORTED_HASH_ALGORITHMS:
        msg = f"unsupported hash algorithm '{algorithm}'"
        raise BackendUnavailableError(msg)

    if preferred == HASH_BACKEND_AUTO:
        names = _AUTO_ORDER
    elif preferred in BACKENDS:
        names = (preferred,)
    else:
        msg = f"unknown hash backend '{preferred}'"
        raise BackendUnavailableError(msg)

    for name in names:
        backend = BACKENDS[name]
        if backend.supports(algorithm):
            return backend

    msg = f"no hash backend supports {algorithm} (tried {', '.join(names)})"
    raise BackendUnavailableError(msg)


def check_backends() -> None:
    """Ensure at least one backend can hash every supported algorithm.

    Raises:
        BackendUnavailableError: If some algorithm has no backend

    """
    for algorithm in SUPPORTED_HASH_ALGORITHMS:
        select_backend(algorithm)


class HashEngine:
    """Computes digests of artifacts in bounded memory."""

    def __init__(
        self,
        settings: HashingSettings | None = None,
        backend: str | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            settings: Hashing settings (defaults when omitted)
            backend: Backend name overriding the configured one

        """
        self.settings = settings or default_settings()["hashing"]
        self.backend = backend or self.settings["backend"]

    async def compute_digests(
        self,
        artifact: VerificationArtifact,
        algorithms: Iterable[HashType],
        on_progress: ProgressCallback | None = None,
        token: CancellationToken | None = None,
    ) -> dict[HashType, str]:
        """Hash an artifact with several algorithms in one pass.

        Progress is reported every ``progress_interval`` bytes, capped at
        99 percent, and a final 100 percent update follows success. The
        token is polled before the first read and then every
        ``cancel_check_interval`` chunks.

        Args:
            artifact: Artifact to hash
            algorithms: Algorithms to compute
            on_progress: Optional progress callback
            token: Optional cancellation token

        Returns:
            Lowercase hex digest per algorithm

        Raises:
            OperationCancelled: If the token was cancelled
            ArtifactReadError: If reading the artifact fails
            BackendUnavailableError: If an algorithm has no backend

        """
        hashers = {
            algorithm: select_backend(algorithm, self.backend).new(algorithm)
            for algorithm in dict.fromkeys(algorithms)
        }
        if not hashers:
            msg = "at least one algorithm is required"
            raise ValueError(msg)

        chunk_size = self.settings["chunk_size"]
        check_interval = self.settings["cancel_check_interval"]
        total = artifact.size
        tracker = ProgressTracker(
            on_progress,
            interval=self.settings["progress_interval"],
            cap=HASH_PROGRESS_CAP,
        )
        tracker.emit(0, f"Hashing {artifact.name}...")
        logger.debug(
            "Hashing %s (%s) with %s",
            artifact.name,
            format_bytes(total),
            ", ".join(hashers),
        )

        if token is not None:
            token.raise_if_cancelled()

        processed = 0
        chunks_read = 0
        async with aclosing(iter_chunks(artifact, chunk_size)) as chunks:
            async for chunk in chunks:
                for hasher in hashers.values():
                    hasher.update(chunk)
                processed += len(chunk)
                chunks_read += 1

                if token is not None and chunks_read % check_interval == 0:
                    token.raise_if_cancelled()

                tracker.advance(
                    processed,
                    total,
                    f"Hashing {artifact.name}: "
                    f"{format_bytes(processed)} / {format_bytes(total)}",
                )

        if token is not None:
            token.raise_if_cancelled()

        digests = {
            algorithm: hasher.hexdigest()
            for algorithm, hasher in hashers.items()
        }
        tracker.complete(f"Hashed {artifact.name}")
        return digests

    async def compute_digest(
        self,
        artifact: VerificationArtifact,
        algorithm: HashType = DEFAULT_HASH_TYPE,
        on_progress: ProgressCallback | None = None,
        token: CancellationToken | None = None,
    ) -> str:
        """Hash an artifact with one algorithm.

        See compute_digests() for progress, cancellation and errors.
        """
        digests = await self.compute_digests(
            artifact, (algorithm,), on_progress, token
        )
        return digests[algorithm]


async def compute_digest(
    source: VerificationArtifact | Path,
    algorithm: HashType = DEFAULT_HASH_TYPE,
    on_progress: ProgressCallback | None = None,
    token: CancellationToken | None = None,
    backend: str | None = None,
) -> str:
    """Compute the hex digest of a file or artifact with default settings.

    Example:
        >>> await compute_digest(Path("ubuntu.iso"))
        'e3b0c442...'

    """
    artifact = (
        source
        if isinstance(source, VerificationArtifact)
        else VerificationArtifact.from_path(Path(source))
    )
    engine = HashEngine(backend=backend)
    return await engine.compute_digest(artifact, algorithm, on_progress, token)
