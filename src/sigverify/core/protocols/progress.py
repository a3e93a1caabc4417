"""Progress reporting primitives for core services.

Core services report progress through a plain callback receiving
ProgressState values. ProgressTracker wraps such a callback and enforces
the two rules every consumer relies on: percentages never go backwards
within one operation, and byte-level progress is coalesced so the
callback fires at a bounded rate instead of once per chunk.

Usage in a service::

    tracker = ProgressTracker(on_progress, interval=64 * 1024 * 1024)
    async for chunk in source:
        tracker.advance(len(chunk), total, "Hashing")
    tracker.complete("Done")

"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto

from sigverify.domain.types import ProgressState

ProgressCallback = Callable[[ProgressState], None]


class ProgressType(Enum):
    """Categories of progress for presentation.

    Attributes:
        HASHING: Digest computation for a queued file
        SIGNATURE: Signature verification pipeline

    """

    HASHING = auto()
    SIGNATURE = auto()


class ProgressTracker:
    """Monotonic, coalescing progress emitter for one operation."""

    def __init__(
        self,
        callback: ProgressCallback | None,
        interval: int = 0,
        cap: float = 100,
    ) -> None:
        """Create a tracker.

        Args:
            callback: Receiver of progress states, or None to discard
            interval: Minimum bytes between byte-driven updates
            cap: Highest percent byte-driven updates may report

        """
        self._callback = callback
        self._interval = interval
        self._cap = cap
        self._percent = 0.0
        self._last_reported_bytes = 0

    @property
    def percent(self) -> float:
        """Last reported percent."""
        return self._percent

    def emit(self, percent: float, message: str) -> None:
        """Report ``percent``, clamped so it never decreases."""
        self._percent = min(100.0, max(self._percent, float(percent)))
        if self._callback is not None:
            self._callback(ProgressState(self._percent, message))

    def advance(
        self,
        processed: int,
        total: int,
        message: str,
        start: float = 0,
        end: float | None = None,
    ) -> bool:
        """Report byte progress if at least ``interval`` bytes passed.

        The byte fraction is mapped onto the [start, end] percent range,
        ``end`` defaulting to the tracker's cap.

        Args:
            processed: Bytes processed so far
            total: Total bytes expected
            message: Message for the update
            start: Percent corresponding to zero bytes
            end: Percent corresponding to ``total`` bytes

        Returns:
            True if an update was emitted

        """
        if processed - self._last_reported_bytes < self._interval:
            return False
        self._last_reported_bytes = processed
        upper = self._cap if end is None else min(end, self._cap)
        fraction = processed / total if total > 0 else 1.0
        self.emit(min(upper, start + (upper - start) * fraction), message)
        return True

    def complete(self, message: str) -> None:
        """Report 100 percent."""
        self.emit(100, message)
