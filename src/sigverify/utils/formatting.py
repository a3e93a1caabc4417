"""Display helpers for sizes, dates and key ids."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

BYTES_PER_UNIT = 1024.0
_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(num_bytes: float) -> str:
    """Convert a byte count to a human-readable string.

    Uses binary multiples with two decimal places above bytes, e.g.
    ``format_bytes(1536)`` returns ``"1.50 KB"``.

    Raises:
        ValueError: If the byte count is negative

    """
    if num_bytes < 0:
        message = "Byte size cannot be negative"
        raise ValueError(message)

    size = float(num_bytes)
    unit_index = 0
    while size >= BYTES_PER_UNIT and unit_index < len(_UNITS) - 1:
        size /= BYTES_PER_UNIT
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} B"
    return f"{size:.2f} {_UNITS[unit_index]}"


def format_date(value: datetime | None) -> str:
    """Format a timestamp as YYYY-MM-DD, or 'unknown'."""
    if value is None:
        return "unknown"
    return value.strftime("%Y-%m-%d")


def format_key_id(key_id: str | None) -> str:
    """Normalize a key id for display (uppercase hex, no spaces)."""
    if not key_id:
        return "unknown"
    return key_id.replace(" ", "").upper()
