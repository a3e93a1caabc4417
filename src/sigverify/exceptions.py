"""Exception classes for sigverify operations."""


class VerifierError(Exception):
    """Base exception for sigverify operations."""

    error_prefix: str = "Operation failed"

    def __init__(self, message: str, target: str | None = None) -> None:
        """Initialize error with message and optional target.

        Args:
            message: Error message describing the failure.
            target: Optional name of the artifact that failed.

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


class InputFormatError(VerifierError):
    """Raised when an artifact has no recognized kind.

    The optional hint names the input slot the artifact belongs in when it
    was recognized but supplied in the wrong place.
    """

    error_prefix = "Invalid format"

    def __init__(
        self,
        message: str,
        target: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize with message, target and optional hint."""
        super().__init__(message, target)
        self.hint = hint


class KeyParseError(VerifierError):
    """Raised when public key material cannot be read."""

    error_prefix = "Could not read public key"


class SignatureParseError(VerifierError):
    """Raised when a signature or signed message cannot be read."""

    error_prefix = "Could not read signature"


class NoManifestLoadedError(VerifierError):
    """Raised when files are queued before a checksum manifest exists."""

    error_prefix = "No checksum manifest loaded"


class ArtifactReadError(VerifierError):
    """Raised when reading an artifact from storage fails."""

    error_prefix = "Read failed"


class BackendUnavailableError(VerifierError):
    """Raised when a required cryptography or hashing backend is missing."""

    error_prefix = "Backend unavailable"


class ConfigurationError(VerifierError):
    """Raised when settings contain invalid values."""

    error_prefix = "Invalid configuration"


class InvalidTransitionError(VerifierError):
    """Raised when a queue job is moved to a status it cannot reach."""

    error_prefix = "Invalid job transition"


class OperationCancelled(Exception):  # noqa: N818
    """Raised when the user aborts a hashing or verification operation.

    Not a VerifierError. Callers must not render a cancelled operation
    as a failure.
    """

    def __init__(self, target: str | None = None) -> None:
        """Initialize with the name of the artifact being processed."""
        super().__init__(
            f"Operation cancelled for '{target}'"
            if target
            else "Operation cancelled"
        )
        self.target = target
