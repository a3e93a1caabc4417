"""Parser for the ``<digest> = <filename>`` form."""

from __future__ import annotations

import re

from sigverify.core.checksum_parser.base import ChecksumParser


class EqualsChecksumParser(ChecksumParser):
    """Parser for ``digest = filename`` lines."""

    name = "equals"
    pattern = re.compile(
        r"^(?P<digest>[0-9a-f]+)\s*=\s*(?P<filename>.+)$",
        re.IGNORECASE,
    )
