"""Verify command handler for sigverify CLI.

Loads a public key, verifies a clearsigned, inline signed or detached
signature, and optionally checks files against a manifest carried by
the verified payload.
"""
# ruff: noqa: T201

import sys
from argparse import Namespace

from sigverify.cli.display import (
    print_json,
    print_keys,
    print_signature_result,
    print_summary,
)
from sigverify.core.session import VerificationSession
from sigverify.exceptions import NoManifestLoadedError
from sigverify.logger import get_logger

from .base import BaseCommandHandler
from .check import queue_exit_status, run_queue
from .helpers import cancel_on_interrupt, create_presenter, open_artifact

logger = get_logger(__name__)


class VerifyHandler(BaseCommandHandler):
    """Handler for the verify command."""

    async def execute(self, args: Namespace) -> None:
        """Verify a signature and the files it vouches for.

        Exits with status 1 if the signature is bad or any checked file
        fails. Ctrl+C cancels the running check; the command then exits
        with EXIT_CANCELLED unless something failed.
        """
        session = VerificationSession(self.settings, create_presenter(args))
        keys = await session.load_keys(open_artifact(args.key))

        signed = open_artifact(args.signed or args.signature)
        data = open_artifact(args.data) if args.data else None
        details = await session.describe(signed)
        if not args.json:
            print_keys(keys)
            for detail in details:
                print(detail)

        with cancel_on_interrupt(session):
            result = await session.verify_signature(signed, data)
        report: dict[str, object] = {
            "keys": [info.to_dict() for info in keys],
            "signature": result.to_dict(),
        }
        if not args.json:
            print_signature_result(result)

        status = 0 if result.valid else 1
        if result.valid and args.check:
            if session.manifest is None:
                msg = "the verified payload holds no checksum lines"
                raise NoManifestLoadedError(msg, signed.name)
            jobs, summary = await run_queue(session, args.check)
            report["jobs"] = [job.to_dict() for job in jobs]
            report["summary"] = summary.to_dict()
            if not args.json and jobs:
                print_summary(summary)
            status = queue_exit_status(jobs, summary)
        elif args.check:
            logger.warning("Skipping file checks: signature not valid")

        if args.json:
            print_json(report)
        if status:
            sys.exit(status)
