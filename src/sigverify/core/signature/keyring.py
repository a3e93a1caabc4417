"""Public keys loaded for a verification session."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sigverify.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sigverify.core.signature.backend import CryptoBackend, ParsedKey
    from sigverify.domain.types import KeyInfo

logger = get_logger(__name__)


class KeyMaterial:
    """Ordered, fingerprint-unique set of public keys.

    Loading replaces the whole set and bumps ``generation`` so anything
    displaying a signature match can tell it was computed against older
    keys.
    """

    def __init__(self, backend: CryptoBackend) -> None:
        """Create an empty key set parsed with ``backend``."""
        self._backend = backend
        self._keys: list[ParsedKey] = []
        self.generation = 0

    def load(self, data: bytes, source_name: str = "<key>") -> list[KeyInfo]:
        """Replace the loaded keys with those parsed from ``data``.

        Raises:
            KeyParseError: If the data holds no readable key. The current
                keys are kept in that case.

        """
        keys = self._backend.parse_keys(data, source_name)
        self.replace(keys)
        for key in keys:
            logger.info("🔑 Loaded key %s", key.info.summary)
        return self.infos

    def replace(self, keys: list[ParsedKey]) -> None:
        """Replace the loaded keys, dropping repeated fingerprints."""
        unique: dict[str, ParsedKey] = {}
        for key in keys:
            unique.setdefault(key.info.fingerprint, key)
        self._keys = list(unique.values())
        self.generation += 1

    def find(self, key_id: str | None) -> ParsedKey | None:
        """Return the key whose primary key or subkey has ``key_id``."""
        for key in self._keys:
            if key.info.matches(key_id):
                return key
        return None

    @property
    def infos(self) -> list[KeyInfo]:
        """Identity of every loaded key, in load order."""
        return [key.info for key in self._keys]

    def summaries(self) -> list[str]:
        """One display line per loaded key."""
        return [key.info.summary for key in self._keys]

    def __len__(self) -> int:
        """Number of loaded keys."""
        return len(self._keys)

    def __iter__(self) -> Iterator[ParsedKey]:
        """Iterate loaded keys in load order."""
        return iter(self._keys)
