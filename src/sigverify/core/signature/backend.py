"""Cryptography collaborator interface.

The pipeline orchestrates; it never performs signature math. Everything
that touches OpenPGP packets goes through a CryptoBackend, which hands
back parsed objects wrapped together with the metadata the pipeline needs
for display and key resolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from sigverify.domain.types import KeyInfo, SignatureInfo


@dataclass(frozen=True, slots=True)
class ParsedKey:
    """A public key with its display metadata."""

    info: KeyInfo
    native: Any = field(repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ParsedSignature:
    """A detached signature with its declared metadata."""

    info: SignatureInfo
    native: Any = field(repr=False, compare=False)


@dataclass(frozen=True, slots=True)
class ParsedMessage:
    """An inline-signed message: payload and signatures as one unit."""

    signatures: tuple[SignatureInfo, ...]
    payload: str | bytes = field(repr=False)
    cleartext: bool
    native: Any = field(repr=False, compare=False)


class StreamVerifier(Protocol):
    """Incremental verifier of one detached signature."""

    def update(self, chunk: bytes) -> None:
        """Consume the next chunk of the signed payload."""
        ...

    def finalize(self) -> bool:
        """Return whether the signature is valid over everything consumed.

        Only meaningful once the whole payload was passed to update().
        """
        ...


class CryptoBackend(Protocol):
    """OpenPGP parsing and verification."""

    name: str

    def parse_keys(self, data: bytes, source_name: str) -> list[ParsedKey]:
        """Parse every public key in armored or binary key data.

        Raises:
            KeyParseError: If no key could be read

        """
        ...

    def parse_signature(
        self, data: bytes, source_name: str
    ) -> ParsedSignature:
        """Parse a detached signature.

        Raises:
            SignatureParseError: If the data is not a readable signature

        """
        ...

    def parse_message(self, data: bytes, source_name: str) -> ParsedMessage:
        """Parse a clearsigned or inline-signed message.

        Raises:
            SignatureParseError: If the data is not a readable signed
                message

        """
        ...

    def verify_message(self, key: ParsedKey, message: ParsedMessage) -> bool:
        """Verify an inline-signed message with one key."""
        ...

    def verify_detached(
        self,
        key: ParsedKey,
        signature: ParsedSignature,
        payload: bytes,
    ) -> bool:
        """Verify a detached signature over an in-memory payload."""
        ...

    def open_stream(
        self, key: ParsedKey, signature: ParsedSignature
    ) -> StreamVerifier:
        """Start incremental verification of a detached signature."""
        ...
