"""Checksum manifest parsing.

Three line grammars are supported:

1. ``<digest>  [*]<filename>`` (GNU coreutils)
2. ``SHA256 (<filename>) = <digest>`` (BSD, Fedora)
3. ``<digest> = <filename>``

Digests are lowercased, the algorithm comes from the digest length and
filenames keep only their final path segment.
"""

from sigverify.core.checksum_parser.base import ChecksumParser
from sigverify.core.checksum_parser.bsd_parser import BSDChecksumParser
from sigverify.core.checksum_parser.detector import (
    contains_checksums,
    parse_entries,
    parse_line,
    parse_manifest,
)
from sigverify.core.checksum_parser.equals_parser import EqualsChecksumParser
from sigverify.core.checksum_parser.normalizer import (
    algorithm_for_digest,
    algorithm_label,
    normalize_filename,
)
from sigverify.core.checksum_parser.traditional_parser import (
    StandardChecksumParser,
)

__all__ = [
    "BSDChecksumParser",
    "ChecksumParser",
    "EqualsChecksumParser",
    "StandardChecksumParser",
    "algorithm_for_digest",
    "algorithm_label",
    "contains_checksums",
    "normalize_filename",
    "parse_entries",
    "parse_line",
    "parse_manifest",
]
