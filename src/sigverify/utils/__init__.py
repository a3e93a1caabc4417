"""Shared helper functions."""

from sigverify.utils.formatting import format_bytes, format_date, format_key_id

__all__ = ["format_bytes", "format_date", "format_key_id"]
