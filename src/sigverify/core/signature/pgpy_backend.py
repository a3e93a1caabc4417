"""PGPy implementation of the cryptography collaborator.

Inline messages and small detached payloads are verified by PGPy itself.
Large detached payloads use PGPyStreamVerifier, which feeds the payload
chunk by chunk into a cryptography hash context and checks the finished
digest against the key material as a prehashed value. The digest covers
exactly what PGPy would hash in memory: the (canonicalized, for text
signatures) document followed by the signature trailer.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed
from pgpy import PGPKey, PGPMessage, PGPSignature
from pgpy.constants import SignatureType
from pgpy.errors import PGPError
from pgpy.packet.fields import DSAPub, ECDSAPub, EdDSAPub, RSAPub

from sigverify.constants import ARMOR_PUBLIC_KEY
from sigverify.core.signature.backend import (
    ParsedKey,
    ParsedMessage,
    ParsedSignature,
)
from sigverify.domain.types import KeyInfo, SignatureInfo
from sigverify.exceptions import KeyParseError, SignatureParseError
from sigverify.logger import get_logger
from sigverify.utils.formatting import format_key_id

if TYPE_CHECKING:
    from pgpy.constants import SecurityIssues

logger = get_logger(__name__)

# Exceptions PGPy raises for malformed or unsupported input
_PARSE_ERRORS = (PGPError, ValueError, TypeError, NotImplementedError)

_KEY_BLOCK = re.compile(
    rb"-----BEGIN PGP PUBLIC KEY BLOCK-----.*?"
    rb"-----END PGP PUBLIC KEY BLOCK-----",
    re.DOTALL,
)
_LINE_ENDING = re.compile(rb"\r?\n")


def _key_info(key: PGPKey) -> KeyInfo:
    return KeyInfo(
        key_id=key.fingerprint.keyid,
        fingerprint=str(key.fingerprint),
        created=key.created,
        user_ids=tuple(uid.userid for uid in key.userids if uid.is_uid),
        subkey_ids=tuple(key.subkeys),
    )


def _signature_info(signature: PGPSignature) -> SignatureInfo:
    return SignatureInfo(
        issuer_key_id=signature.signer or None,
        created=signature.created,
        hash_algorithm=signature.hash_algorithm.name,
        key_algorithm=signature.key_algorithm.name,
        is_text=signature.type == SignatureType.CanonicalDocument,
    )


def _signing_key(key: PGPKey, issuer: str | None) -> PGPKey:
    """Return the primary key or subkey that issued a signature."""
    wanted = format_key_id(issuer)
    for subkey_id, subkey in key.subkeys.items():
        if format_key_id(subkey_id) == wanted:
            return subkey
    return key


def _hash_algorithm(signature: PGPSignature) -> hashes.HashAlgorithm:
    name = signature.hash_algorithm.name
    algorithm = getattr(hashes, name, None)
    if algorithm is None:
        msg = f"unsupported signature hash algorithm {name}"
        raise SignatureParseError(msg)
    return algorithm()


def _key_issues(key: PGPKey) -> SecurityIssues:
    """Key problems that PGPy treats as verification failures."""
    return key.check_soundness() | key.check_primitives()


def _verify_digest(
    key: PGPKey,
    signature: PGPSignature,
    digest: bytes,
    algorithm: hashes.HashAlgorithm,
) -> bool:
    """Check a finished document digest against the key material."""
    material = key._key.keymaterial  # noqa: SLF001
    sigbytes = signature.__sig__
    if isinstance(material, EdDSAPub):
        # EdDSA signs the digest itself rather than a prehash
        try:
            material.__pubkey__().verify(bytes(sigbytes), digest)
        except InvalidSignature:
            return False
        return True
    if isinstance(material, (RSAPub, DSAPub, ECDSAPub)):
        return material.verify(digest, sigbytes, Prehashed(algorithm))
    msg = f"unsupported key algorithm {key.key_algorithm.name}"
    raise SignatureParseError(msg)


class PGPyStreamVerifier:
    """Incremental detached-signature check for one key and signature."""

    def __init__(self, key: PGPKey, signature: PGPSignature) -> None:
        """Prepare the hash context for the signature's algorithm.

        Args:
            key: Primary key or subkey that issued the signature
            signature: The detached signature

        """
        self._key = key
        self._signature = signature
        self._algorithm = _hash_algorithm(signature)
        self._context = hashes.Hash(self._algorithm)
        self._canonical = signature.type == SignatureType.CanonicalDocument
        self._pending_cr = False
        self._finalized = False

    def update(self, chunk: bytes) -> None:
        """Hash the next payload chunk."""
        if self._finalized:
            msg = "update() after finalize()"
            raise RuntimeError(msg)
        if self._canonical:
            chunk = self._canonicalize(chunk)
        self._context.update(chunk)

    def _canonicalize(self, chunk: bytes) -> bytes:
        """Convert line endings to CRLF across chunk boundaries."""
        if self._pending_cr:
            chunk = b"\r" + chunk
            self._pending_cr = False
        # A trailing CR may be the first half of a CRLF split between chunks
        if chunk.endswith(b"\r"):
            chunk = chunk[:-1]
            self._pending_cr = True
        return _LINE_ENDING.sub(b"\r\n", chunk)

    def finalize(self) -> bool:
        """Return whether the signature is valid over the hashed payload."""
        if self._finalized:
            msg = "finalize() called twice"
            raise RuntimeError(msg)
        self._finalized = True
        if self._pending_cr:
            self._context.update(b"\r")
        # hashdata of an empty subject is exactly the signature trailer
        self._context.update(self._signature.hashdata(b""))
        digest = self._context.finalize()

        issues = _key_issues(self._key)
        if issues and issues.causes_signature_verify_to_fail:
            logger.warning(
                "Key %s is not usable: %r", self._key.fingerprint, issues
            )
            return False
        return _verify_digest(
            self._key, self._signature, digest, self._algorithm
        )


class PGPyBackend:
    """CryptoBackend built on PGPy."""

    name = "pgpy"

    def parse_keys(self, data: bytes, source_name: str) -> list[ParsedKey]:
        """Parse all keys in ``data``, deduplicated by fingerprint.

        Several armored blocks in one input are all read; binary input may
        hold a keyring of concatenated keys. Secret keys contribute only
        their public half.
        """
        if ARMOR_PUBLIC_KEY.encode() in data:
            blocks = _KEY_BLOCK.findall(data)
        else:
            blocks = [data]
        if not blocks:
            msg = "unterminated public key block"
            raise KeyParseError(msg, source_name)

        keys: dict[str, ParsedKey] = {}
        for block in blocks:
            try:
                primary, others = PGPKey.from_blob(block)
                for candidate in (primary, *others.values()):
                    key = (
                        candidate if candidate.is_public else candidate.pubkey
                    )
                    fingerprint = str(key.fingerprint)
                    if fingerprint not in keys:
                        keys[fingerprint] = ParsedKey(_key_info(key), key)
            except (*_PARSE_ERRORS, AttributeError) as e:
                message = str(e) or type(e).__name__
                raise KeyParseError(message, source_name) from e

        logger.debug("Parsed %d keys from %s", len(keys), source_name)
        return list(keys.values())

    def parse_signature(
        self, data: bytes, source_name: str
    ) -> ParsedSignature:
        """Parse a detached signature, armored or binary."""
        try:
            signature = PGPSignature.from_blob(data)
            info = _signature_info(signature)
        except (*_PARSE_ERRORS, AttributeError, KeyError) as e:
            # An unknown signature version leaves the packet unparsed
            message = str(e) or type(e).__name__
            raise SignatureParseError(message, source_name) from e
        return ParsedSignature(info, signature)

    def parse_message(self, data: bytes, source_name: str) -> ParsedMessage:
        """Parse a clearsigned or inline-signed message."""
        try:
            message = PGPMessage.from_blob(data)
            encrypted = message.type == "encrypted"
            signatures = tuple(
                _signature_info(sig) for sig in message.signatures
            )
            payload = message.message
        except (*_PARSE_ERRORS, AttributeError, KeyError) as e:
            text = str(e) or type(e).__name__
            raise SignatureParseError(text, source_name) from e

        if encrypted:
            msg = "encrypted messages are not supported"
            raise SignatureParseError(msg, source_name)
        if not signatures:
            msg = "message carries no signature"
            raise SignatureParseError(msg, source_name)
        if isinstance(payload, bytearray):
            payload = bytes(payload)
        return ParsedMessage(
            signatures=signatures,
            payload=payload,
            cleartext=message.type == "cleartext",
            native=message,
        )

    def verify_message(self, key: ParsedKey, message: ParsedMessage) -> bool:
        """Verify every signature ``key`` made on ``message``."""
        try:
            return bool(key.native.verify(message.native))
        except PGPError:
            # No signature on the message was made by this key
            return False

    def verify_detached(
        self,
        key: ParsedKey,
        signature: ParsedSignature,
        payload: bytes,
    ) -> bool:
        """Verify a detached signature over an in-memory payload."""
        try:
            return bool(key.native.verify(payload, signature.native))
        except PGPError:
            return False

    def open_stream(
        self, key: ParsedKey, signature: ParsedSignature
    ) -> PGPyStreamVerifier:
        """Start incremental verification with the issuing (sub)key."""
        signer = _signing_key(key.native, signature.info.issuer_key_id)
        return PGPyStreamVerifier(signer, signature.native)
