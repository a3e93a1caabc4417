"""Pytest configuration and fixtures for sigverify tests."""

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest

# Keep log files out of ~/.config before sigverify creates its logger
os.environ.setdefault(
    "SIGVERIFY_LOG_DIR", tempfile.mkdtemp(prefix="sigverify-logs-")
)

from pgpy import PGPKey, PGPMessage, PGPUID  # noqa: E402
from pgpy.constants import (  # noqa: E402
    CompressionAlgorithm,
    EllipticCurveOID,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from sigverify.config import Settings, default_settings  # noqa: E402
from sigverify.domain.types import VerificationArtifact  # noqa: E402

MANIFEST_TEXT = (
    "# release checksums\n"
    "2c26b46b68ffc68ff99b453c1d30413413422d706483bfa0f98a5e886266e7ae"
    "  foo.txt\n"
    "fcde2b2edba56bf408601fb721fe9b5c338d10ee429ea04fae5511b68fbf8fb9"
    "  bar.txt\n"
)


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers,
    even those created with propagate=False in production code.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("sigverify"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


def _new_key(
    algorithm: PubKeyAlgorithm,
    size: int | EllipticCurveOID,
    name: str,
) -> PGPKey:
    key = PGPKey.new(algorithm, size)
    uid = PGPUID.new(name, email=f"{name.lower()}@example.com")
    key.add_uid(
        uid,
        usage={KeyFlags.Sign, KeyFlags.Certify},
        hashes=[HashAlgorithm.SHA256],
        ciphers=[SymmetricKeyAlgorithm.AES256],
        compression=[CompressionAlgorithm.ZLIB],
    )
    return key


@pytest.fixture(scope="session")
def rsa_key() -> PGPKey:
    """RSA 2048 signing key (secret)."""
    return _new_key(PubKeyAlgorithm.RSAEncryptOrSign, 2048, "Alice")


@pytest.fixture(scope="session")
def ed25519_key() -> PGPKey:
    """Ed25519 signing key (secret)."""
    return _new_key(PubKeyAlgorithm.EdDSA, EllipticCurveOID.Ed25519, "Bob")


@pytest.fixture(scope="session")
def ecdsa_key() -> PGPKey:
    """ECDSA P-256 signing key (secret)."""
    return _new_key(
        PubKeyAlgorithm.ECDSA, EllipticCurveOID.NIST_P256, "Carol"
    )


@pytest.fixture(scope="session")
def other_key() -> PGPKey:
    """A key that signs nothing the tests load."""
    return _new_key(
        PubKeyAlgorithm.EdDSA, EllipticCurveOID.Ed25519, "Mallory"
    )


@pytest.fixture(scope="session")
def subkey_pair() -> tuple[PGPKey, PGPKey]:
    """A primary key plus a signing subkey, returned as (primary, sub)."""
    primary = _new_key(PubKeyAlgorithm.RSAEncryptOrSign, 2048, "Dave")
    subkey = PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    primary.add_subkey(subkey, usage={KeyFlags.Sign})
    return primary, primary.subkeys[subkey.fingerprint.keyid]


def _clearsign(key: PGPKey, text: str) -> str:
    message = PGPMessage.new(text, cleartext=True)
    message |= key.sign(message)
    return str(message)


def _inline_sign(key: PGPKey, text: str) -> str:
    message = PGPMessage.new(
        text, compression=CompressionAlgorithm.Uncompressed
    )
    message |= key.sign(message)
    return str(message)


def _text_signature(key: PGPKey, text: str) -> str:
    return str(key.sign(PGPMessage.new(text, cleartext=True)))


@pytest.fixture
def clearsign() -> Callable[[PGPKey, str], str]:
    """Clearsign text with a key."""
    return _clearsign


@pytest.fixture
def inline_sign() -> Callable[[PGPKey, str], str]:
    """Build an armored inline-signed message."""
    return _inline_sign


@pytest.fixture
def text_signature() -> Callable[[PGPKey, str], str]:
    """Make an armored detached text-mode signature."""
    return _text_signature


@pytest.fixture
def manifest_text() -> str:
    """SHA-256 manifest listing foo.txt (b"foo") and bar.txt (b"bar")."""
    return MANIFEST_TEXT


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build settings with section overrides.

    Example:
        make_settings(hashing={"chunk_size": 4})

    """

    def _make(**overrides: dict) -> Settings:
        settings = default_settings()
        for section, values in overrides.items():
            settings[section] = {**settings[section], **values}
        return settings

    return _make


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, bytes | str], Path]:
    """Write a file under tmp_path and return its path."""

    def _write(name: str, content: bytes | str) -> Path:
        path = tmp_path / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8", newline="")
        else:
            path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def artifact_for(
    write_file: Callable[[str, bytes | str], Path],
) -> Callable[[str, bytes | str], VerificationArtifact]:
    """Write a file and return a file-backed artifact for it."""

    def _artifact(name: str, content: bytes | str) -> VerificationArtifact:
        return VerificationArtifact.from_path(write_file(name, content))

    return _artifact
