"""Cooperative cancellation for hashing and verification runs.

A token is created when an operation starts and dropped when it ends.
Long-running loops poll it at their suspension points; nothing is ever
interrupted from outside.
"""

from __future__ import annotations

from sigverify.exceptions import OperationCancelled


class CancellationToken:
    """Polled cancellation flag for one operation."""

    __slots__ = ("_cancelled", "target")

    def __init__(self, target: str | None = None) -> None:
        """Create an un-cancelled token.

        Args:
            target: Name of the artifact the operation works on

        """
        self._cancelled = False
        self.target = target

    @property
    def cancelled(self) -> bool:
        """Whether cancellation was requested."""
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelled if cancellation was requested."""
        if self._cancelled:
            raise OperationCancelled(self.target)


class CancellationScope:
    """Owns the token of the one operation currently running.

    Used by the queue and the session to cancel "whatever is running"
    without holding on to tokens of finished operations.
    """

    def __init__(self) -> None:
        """Create a scope with no active operation."""
        self._current: CancellationToken | None = None

    @property
    def active(self) -> bool:
        """Whether an operation is running."""
        return self._current is not None

    def open(self, target: str | None = None) -> CancellationToken:
        """Create the token for a new operation."""
        self._current = CancellationToken(target)
        return self._current

    def close(self, token: CancellationToken) -> None:
        """Drop ``token`` if it is still the current one."""
        if self._current is token:
            self._current = None

    def cancel(self) -> bool:
        """Cancel the running operation.

        Returns:
            True if an operation was running

        """
        if self._current is None:
            return False
        self._current.cancel()
        return True
