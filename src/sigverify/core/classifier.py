"""Artifact classification from a bounded prefix.

Only the first CLASSIFY_PREFIX_BYTES bytes (binary checks) and
CLASSIFY_PREFIX_CHARS characters (text checks) are ever inspected, so a
multi-gigabyte payload is classified without reading it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sigverify.constants import (
    ARMOR_MESSAGE,
    ARMOR_PUBLIC_KEY,
    ARMOR_SIGNATURE,
    ARMOR_SIGNED_MESSAGE,
    CLASSIFY_PREFIX_BYTES,
    CLASSIFY_PREFIX_CHARS,
    KEY_PACKET_TAGS,
    MESSAGE_PACKET_TAGS,
    PACKET_TAG_SIGNATURE,
)
from sigverify.core.checksum_parser import contains_checksums
from sigverify.core.io import read_prefix
from sigverify.domain.types import ArtifactKind, Slot
from sigverify.exceptions import InputFormatError
from sigverify.logger import get_logger

if TYPE_CHECKING:
    from sigverify.domain.types import VerificationArtifact

logger = get_logger(__name__)

# UTF-8 needs up to 4 bytes per character
_TEXT_PREFIX_BYTES = CLASSIFY_PREFIX_CHARS * 4

# Armor markers in priority order
_ARMOR_KINDS: tuple[tuple[str, ArtifactKind], ...] = (
    (ARMOR_PUBLIC_KEY, ArtifactKind.PUBLIC_KEY),
    (ARMOR_SIGNED_MESSAGE, ArtifactKind.CLEAR_SIGNED),
    (ARMOR_MESSAGE, ArtifactKind.INLINE_SIGNED),
    (ARMOR_SIGNATURE, ArtifactKind.DETACHED_SIGNATURE_ARMORED),
)

_TEXT_CONTROL_BYTES = frozenset(b"\t\n\r")

# Which slot each kind belongs in
_KIND_SLOTS: dict[ArtifactKind, Slot] = {
    ArtifactKind.PUBLIC_KEY: Slot.KEY,
    ArtifactKind.CLEAR_SIGNED: Slot.SIGNED,
    ArtifactKind.INLINE_SIGNED: Slot.SIGNED,
    ArtifactKind.DETACHED_SIGNATURE_ARMORED: Slot.SIGNED,
    ArtifactKind.DETACHED_SIGNATURE_BINARY: Slot.SIGNED,
    ArtifactKind.CHECKSUM_MANIFEST: Slot.MANIFEST,
}

_SLOT_HINTS: dict[Slot, str] = {
    Slot.KEY: "This looks like a public key. Load it as the key (--key).",
    Slot.SIGNED: (
        "This looks like a signature or signed message. Load it as the "
        "signed file (--signed or --signature)."
    ),
    Slot.MANIFEST: (
        "This looks like a checksum manifest. Load it as the manifest "
        "(--manifest)."
    ),
}


@dataclass(frozen=True, slots=True)
class Classification:
    """Detected kind of an artifact plus an optional user hint."""

    kind: ArtifactKind
    hint: str | None = None

    @property
    def slot(self) -> Slot | None:
        """Input slot the artifact belongs in, if it has a specific one."""
        return _KIND_SLOTS.get(self.kind)


def packet_tag(first_byte: int) -> int | None:
    """Decode the OpenPGP packet tag from a packet's first byte.

    Returns:
        The tag for old-format (bit 6 clear) or new-format (bit 6 set)
        headers, or None when bit 7 is clear (not a packet header)

    """
    if not first_byte & 0x80:
        return None
    if first_byte & 0x40:
        return first_byte & 0x3F
    return (first_byte >> 2) & 0x0F


def _looks_like_text(prefix: bytes) -> bool:
    """Whether the prefix is control-free UTF-8, allowing a cut last char."""
    controls = (b for b in prefix if b < 0x20)  # noqa: PLR2004
    if any(b not in _TEXT_CONTROL_BYTES for b in controls):
        return False
    for cut in range(4):
        try:
            prefix[: len(prefix) - cut].decode("utf-8")
        except UnicodeDecodeError:
            continue
        else:
            return True
    return False


def _classify_binary(prefix: bytes) -> Classification | None:
    """Classify by the leading packet byte, or None for text."""
    first = prefix[0]
    tag = packet_tag(first)
    if tag is not None and _looks_like_text(prefix):
        # Non-ASCII text such as "«" (0xC2 0xAB) shares lead bytes with
        # new-format packet headers
        return None
    if tag in KEY_PACKET_TAGS:
        return Classification(ArtifactKind.PUBLIC_KEY, "binary OpenPGP key")
    if tag == PACKET_TAG_SIGNATURE:
        return Classification(
            ArtifactKind.DETACHED_SIGNATURE_BINARY,
            "binary OpenPGP signature",
        )
    if tag in MESSAGE_PACKET_TAGS:
        return Classification(
            ArtifactKind.INLINE_SIGNED, "binary OpenPGP message"
        )
    if tag is not None:
        return Classification(
            ArtifactKind.DETACHED_SIGNATURE_BINARY,
            "binary OpenPGP packet",
        )
    if first < 0x20 and first not in _TEXT_CONTROL_BYTES:  # noqa: PLR2004
        return Classification(
            ArtifactKind.UNKNOWN, "binary data, not an OpenPGP packet"
        )
    return None


def classify(
    prefix_bytes: bytes, prefix_text: str | None = None
) -> Classification:
    """Determine the kind of an artifact from its prefix.

    Binary packet headers are checked first. Text is then searched for
    armor markers in fixed priority (public key, signed message, message,
    signature) and finally tested against the checksum line grammars.

    Args:
        prefix_bytes: Leading bytes of the artifact
        prefix_text: Leading text, decoded from the bytes when omitted

    Returns:
        The classification; PlainData or Unknown when nothing matched

    """
    prefix_bytes = prefix_bytes.removeprefix(b"\xef\xbb\xbf")
    if not prefix_bytes and not prefix_text:
        return Classification(ArtifactKind.UNKNOWN, "empty input")

    if prefix_bytes:
        binary = _classify_binary(prefix_bytes[:CLASSIFY_PREFIX_BYTES])
        if binary is not None:
            return binary

    if prefix_text is None:
        prefix_text = prefix_bytes.decode("utf-8", errors="replace")
    text = prefix_text[:CLASSIFY_PREFIX_CHARS]

    for marker, kind in _ARMOR_KINDS:
        if marker in text:
            return Classification(kind)

    if contains_checksums(text):
        return Classification(ArtifactKind.CHECKSUM_MANIFEST)

    return Classification(
        ArtifactKind.PLAIN_DATA,
        "no OpenPGP armor or checksum lines found",
    )


async def classify_artifact(
    artifact: VerificationArtifact,
) -> Classification:
    """Classify an artifact, reading only its prefix.

    Raises:
        ArtifactReadError: If the prefix cannot be read

    """
    prefix = await read_prefix(artifact, _TEXT_PREFIX_BYTES)
    text = prefix.removeprefix(b"\xef\xbb\xbf").decode(
        "utf-8", errors="replace"
    )
    result = classify(prefix, text)
    logger.debug("Classified %s as %s", artifact.name, result.kind.value)
    return result


def ensure_slot(
    classification: Classification,
    slot: Slot,
    target: str | None = None,
) -> None:
    """Check that an artifact was supplied in the slot it belongs in.

    Data artifacts may be of any kind; other slots require their own
    kinds.

    Raises:
        InputFormatError: With a hint naming the right slot when the
            artifact belongs elsewhere, or a plain format error when it
            was not recognized at all

    """
    if slot is Slot.DATA:
        return
    actual = classification.slot
    if actual is slot:
        return

    if actual is None:
        msg = (
            f"expected a {slot.value} artifact, got "
            f"{classification.kind.label}"
        )
        raise InputFormatError(msg, target, classification.hint)

    msg = f"expected a {slot.value} artifact, got {classification.kind.label}"
    raise InputFormatError(msg, target, _SLOT_HINTS[actual])
