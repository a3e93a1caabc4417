"""Tests for exception classes."""

import pytest

from sigverify.exceptions import (
    ArtifactReadError,
    BackendUnavailableError,
    ConfigurationError,
    InputFormatError,
    InvalidTransitionError,
    KeyParseError,
    NoManifestLoadedError,
    OperationCancelled,
    SignatureParseError,
    VerifierError,
)


class TestVerifierError:
    """Test the base error formatting."""

    def test_without_target(self):
        error = VerifierError("Test error")
        assert error.message == "Test error"
        assert error.target is None
        assert str(error) == "Operation failed: Test error"

    def test_with_target(self):
        error = VerifierError("truncated", target="SHA256SUMS")
        assert str(error) == "Operation failed for 'SHA256SUMS': truncated"

    def test_raise_and_catch(self):
        with pytest.raises(VerifierError) as exc_info:
            raise KeyParseError("no key packets", target="key.asc")
        assert exc_info.value.target == "key.asc"
        assert "key.asc" in str(exc_info.value)


@pytest.mark.parametrize(
    ("error_class", "prefix"),
    [
        (InputFormatError, "Invalid format"),
        (KeyParseError, "Could not read public key"),
        (SignatureParseError, "Could not read signature"),
        (NoManifestLoadedError, "No checksum manifest loaded"),
        (ArtifactReadError, "Read failed"),
        (BackendUnavailableError, "Backend unavailable"),
        (ConfigurationError, "Invalid configuration"),
        (InvalidTransitionError, "Invalid job transition"),
    ],
)
def test_error_prefixes(error_class, prefix):
    error = error_class("boom")
    assert isinstance(error, VerifierError)
    assert str(error) == f"{prefix}: boom"


class TestInputFormatError:
    """Test the wrong-slot hint."""

    def test_hint_defaults_to_none(self):
        assert InputFormatError("unknown").hint is None

    def test_hint_is_kept(self):
        error = InputFormatError(
            "this is a checksum manifest",
            target="SHA256SUMS",
            hint="pass it with --manifest",
        )
        assert error.hint == "pass it with --manifest"
        assert "SHA256SUMS" in str(error)


class TestOperationCancelled:
    """Cancellation is not a verification failure."""

    def test_not_a_verifier_error(self):
        assert not issubclass(OperationCancelled, VerifierError)

    def test_message(self):
        assert str(OperationCancelled()) == "Operation cancelled"
        error = OperationCancelled("ubuntu.iso")
        assert error.target == "ubuntu.iso"
        assert str(error) == "Operation cancelled for 'ubuntu.iso'"
