"""Console output helpers for the CLI.

These use print() so results stay visible whatever the console log level
is, and so machine-readable output (digest lines, JSON) is never mixed
with log formatting.
"""
# ruff: noqa: T201

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from sigverify.core.queue import QueueSummary
    from sigverify.domain.types import (
        JobOutcome,
        KeyInfo,
        SignatureResult,
        VerificationJob,
    )

# Icon per job outcome value
_OUTCOME_ICONS: dict[str, str] = {
    "verified": "✅",
    "verified_by_content": "✅",
    "digest_mismatch": "❌",
    "filename_mismatch": "⚠️ ",
    "cancelled": "⏹️ ",
}


def print_json(payload: Any) -> None:  # noqa: ANN401
    """Print ``payload`` as indented JSON."""
    print(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode())


def print_success(message: str) -> None:
    """Print a success message."""
    print(f"✅ {message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    print(f"❌ {message}", file=sys.stderr)


def print_warning(message: str) -> None:
    """Print a warning message."""
    print(f"⚠️  {message}")


def print_hint(message: str) -> None:
    """Print a hint following an error."""
    print(f"💡 {message}", file=sys.stderr)


def print_cancelled(message: str) -> None:
    """Print a cancellation notice."""
    print(f"⏹️  {message}")


def outcome_icon(outcome: JobOutcome) -> str:
    """Icon for a job outcome."""
    return _OUTCOME_ICONS[outcome.value]


def print_job(job: VerificationJob) -> None:
    """Print the final line for a finished queue job."""
    if job.result is None:
        print_error(f"{job.name}: {job.error or 'failed'}")
        return
    result = job.result
    print(f"{outcome_icon(result.outcome)} {job.name}: {result.message}")
    if result.expected_digest and not result.outcome.is_success:
        print(f"    expected: {result.expected_digest}")
        print(f"    computed: {result.computed_digest}")


def print_keys(keys: list[KeyInfo]) -> None:
    """Print one line per loaded key."""
    for info in keys:
        print(f"🔑 {info.summary}")


def print_signature_result(result: SignatureResult) -> None:
    """Print the outcome of a signature verification."""
    if result.valid:
        signer = result.signer.summary if result.signer else "unknown key"
        print_success(f"Good signature from {signer}")
        if result.signing_time is not None:
            print(f"    signed: {result.signing_time.isoformat()}")
        return
    print_error(f"BAD signature: {result.reason}")


def print_summary(summary: QueueSummary) -> None:
    """Print the aggregate queue result."""
    line = summary.message
    if summary.errors:
        line += f", {summary.errors} failed"
    if summary.cancelled:
        line += f", {summary.cancelled} cancelled"
    if summary.verified == summary.total:
        print_success(line)
    elif summary.verified + summary.cancelled == summary.total:
        print_cancelled(line)
    else:
        print_warning(line)
