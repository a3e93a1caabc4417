"""Parser for the BSD/Fedora form: ``SHA256 (<filename>) = <digest>``."""

from __future__ import annotations

import re

from sigverify.core.checksum_parser.base import ChecksumParser


class BSDChecksumParser(ChecksumParser):
    """Parser for ``ALGO (filename) = digest`` lines.

    The algorithm label is informational only; the digest length decides
    the algorithm like in every other grammar. The name runs up to the
    last ``) =``, so it may itself contain parentheses.
    """

    name = "bsd"
    pattern = re.compile(
        r"^(?:SHA256|SHA512|SHA1|MD5)\s*\((?P<filename>.+)\)"
        r"\s*=\s*(?P<digest>[0-9a-f]+)\s*$",
        re.IGNORECASE,
    )
