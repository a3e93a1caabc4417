"""Manifest parsing across all supported line grammars."""

from __future__ import annotations

from sigverify.core.checksum_parser.base import ChecksumParser
from sigverify.core.checksum_parser.bsd_parser import BSDChecksumParser
from sigverify.core.checksum_parser.equals_parser import EqualsChecksumParser
from sigverify.core.checksum_parser.traditional_parser import (
    StandardChecksumParser,
)
from sigverify.domain.types import ChecksumEntry, ChecksumManifest
from sigverify.logger import get_logger

logger = get_logger(__name__)

# Equals is tried before standard: "digest = name" also fits the standard
# pattern, with "= name" as the filename.
PARSERS: tuple[ChecksumParser, ...] = (
    BSDChecksumParser(),
    EqualsChecksumParser(),
    StandardChecksumParser(),
)


def _content_lines(text: str) -> list[str]:
    """Return stripped lines that are neither blank nor comments."""
    lines = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line and not line.startswith("#"):
            lines.append(line)
    return lines


def parse_line(line: str) -> ChecksumEntry | None:
    """Parse one stripped line with the first grammar that accepts it."""
    for parser in PARSERS:
        entry = parser.parse_line(line)
        if entry is not None:
            return entry
    return None


def parse_entries(text: str) -> dict[str, ChecksumEntry]:
    """Parse manifest text into filename → entry.

    A later line for the same filename replaces the earlier one. Lines in
    no known grammar are skipped.
    """
    entries: dict[str, ChecksumEntry] = {}
    skipped = 0
    for line in _content_lines(text):
        entry = parse_line(line)
        if entry is None:
            skipped += 1
            continue
        if entry.filename in entries:
            logger.debug(
                "Duplicate entry for %s, using later line", entry.filename
            )
            # Re-insert so iteration order follows the winning line
            del entries[entry.filename]
        entries[entry.filename] = entry

    if skipped:
        logger.debug("Skipped %d unrecognized manifest lines", skipped)
    return entries


def parse_manifest(
    text: str, source_name: str = "<manifest>"
) -> ChecksumManifest:
    """Parse manifest text into a ChecksumManifest.

    Args:
        text: Manifest source text
        source_name: Name shown to the user (usually the file name)

    Returns:
        Parsed manifest, possibly empty

    """
    entries = parse_entries(text)
    logger.debug(
        "Parsed %d checksum entries from %s", len(entries), source_name
    )
    return ChecksumManifest(
        entries=entries,
        content_key=ChecksumManifest.content_key_for(text),
        source_name=source_name,
    )


def contains_checksums(text: str) -> bool:
    """Whether any line of ``text`` is a checksum line."""
    return any(parse_line(line) is not None for line in _content_lines(text))
