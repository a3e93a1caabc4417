"""Parser for the GNU coreutils form: ``<digest>  [*]<filename>``."""

from __future__ import annotations

import re

from sigverify.core.checksum_parser.base import ChecksumParser


class StandardChecksumParser(ChecksumParser):
    """Parser for SHA256SUMS-style lines.

    A ``*`` directly before the name is the binary-mode marker written by
    ``sha256sum -b`` and is not part of the filename.
    """

    name = "standard"
    pattern = re.compile(
        r"^(?P<digest>[0-9a-f]+)\s+\*?(?P<filename>\S.*)$",
        re.IGNORECASE,
    )
