"""Check command handler for sigverify CLI."""

import sys
from argparse import Namespace

from sigverify.cli.display import print_json, print_summary
from sigverify.constants import EXIT_CANCELLED
from sigverify.core.queue import QueueSummary
from sigverify.core.session import VerificationSession
from sigverify.domain.types import VerificationJob

from .base import BaseCommandHandler
from .helpers import (
    cancel_on_interrupt,
    create_presenter,
    open_artifact,
    open_artifacts,
)


async def run_queue(
    session: VerificationSession, paths: list[str]
) -> tuple[list[VerificationJob], QueueSummary]:
    """Queue files on a session and wait for all of them to finish.

    Ctrl+C cancels the file being hashed instead of ending the process.
    """
    jobs = await session.enqueue_files(open_artifacts(paths))
    with cancel_on_interrupt(session):
        await session.wait_idle()
    return jobs, session.queue.summary()


def queue_exit_status(
    jobs: list[VerificationJob], summary: QueueSummary
) -> int:
    """Exit status for a finished queue.

    Returns:
        0 if every file verified, EXIT_CANCELLED if the rest were
        cancelled, 1 otherwise

    """
    if not jobs:
        return 1
    if summary.verified == summary.total:
        return 0
    if summary.verified + summary.cancelled == summary.total:
        return EXIT_CANCELLED
    return 1


class CheckHandler(BaseCommandHandler):
    """Handler for the check command."""

    async def execute(self, args: Namespace) -> None:
        """Check files against a checksum manifest.

        Exits with status 1 unless every file verified, or with
        EXIT_CANCELLED when the only unverified files were cancelled.
        """
        session = VerificationSession(self.settings, create_presenter(args))
        manifest = await session.load_manifest(open_artifact(args.manifest))
        jobs, summary = await run_queue(session, args.files)

        if args.json:
            print_json(
                {
                    "manifest": {
                        "source": manifest.source_name,
                        "entries": len(manifest),
                        "algorithm": manifest.algorithm_label,
                    },
                    "jobs": [job.to_dict() for job in jobs],
                    "summary": summary.to_dict(),
                }
            )
        elif jobs:
            print_summary(summary)

        status = queue_exit_status(jobs, summary)
        if status:
            sys.exit(status)
