"""Normalization helpers shared by the checksum parsers."""

from __future__ import annotations

import re

from sigverify.constants import HASH_LABELS, HASH_LENGTH_MAP, HashType

_PATH_SEPARATORS = re.compile(r"[/\\]")


def normalize_digest(digest: str) -> str:
    """Return the digest as lowercase hex."""
    return digest.strip().lower()


def normalize_filename(filename: str) -> str:
    """Keep only the final path segment of a manifest filename.

    Both ``/`` and ``\\`` separate directories, so ``dist/app.tar.gz`` and
    ``C:\\build\\app.tar.gz`` both become ``app.tar.gz``.
    """
    return _PATH_SEPARATORS.split(filename.strip())[-1].strip()


def algorithm_for_digest(digest: str) -> HashType | None:
    """Return the algorithm implied by the digest's hex length, if any."""
    return HASH_LENGTH_MAP.get(len(digest))


def algorithm_label(digest: str) -> str:
    """Return MD5, SHA-1, SHA-256, SHA-512 or Unknown for a digest."""
    algorithm = algorithm_for_digest(digest)
    if algorithm is None:
        return "Unknown"
    return HASH_LABELS[algorithm]
