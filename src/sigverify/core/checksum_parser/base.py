"""Base class for checksum manifest line parsers."""

from __future__ import annotations

import re
from typing import ClassVar

from sigverify.core.checksum_parser.normalizer import (
    algorithm_for_digest,
    normalize_digest,
    normalize_filename,
)
from sigverify.domain.types import ChecksumEntry


class ChecksumParser:
    """Parser for one manifest line grammar.

    Subclasses provide ``pattern``, a regular expression with ``digest``
    and ``filename`` named groups matched against a stripped line. The
    base class turns a match into a normalized ChecksumEntry: lowercase
    digest, algorithm from digest length, final path segment as name.
    """

    name: ClassVar[str] = "base"
    pattern: ClassVar[re.Pattern[str]]

    def parse_line(self, line: str) -> ChecksumEntry | None:
        """Parse a single stripped, non-comment line.

        Args:
            line: The line to parse

        Returns:
            A ChecksumEntry, or None if the line is not in this grammar
            or its digest length names no supported algorithm

        """
        match = self.pattern.match(line)
        if match is None:
            return None

        digest = normalize_digest(match.group("digest"))
        algorithm = algorithm_for_digest(digest)
        filename = normalize_filename(match.group("filename"))
        if algorithm is None or not filename:
            return None
        return ChecksumEntry(filename, digest, algorithm)

    def matches(self, line: str) -> bool:
        """Whether ``line`` parses in this grammar."""
        return self.parse_line(line) is not None
