"""Digest command handler for sigverify CLI."""
# ruff: noqa: T201

from argparse import Namespace

from sigverify.cli.display import print_json
from sigverify.core.hashing import HashEngine, select_backend
from sigverify.logger import get_logger

from .base import BaseCommandHandler
from .helpers import open_artifacts

logger = get_logger(__name__)


class DigestHandler(BaseCommandHandler):
    """Handler for the digest command.

    Output lines use the ``<digest>  <filename>`` form, so redirecting
    them to a file produces a manifest the check command accepts.
    """

    async def execute(self, args: Namespace) -> None:
        """Hash every file with the chosen algorithm."""
        # Fail before reading anything if the backend cannot do it
        select_backend(args.algorithm, args.backend)
        engine = HashEngine(self.settings["hashing"], backend=args.backend)

        rows = []
        for artifact in open_artifacts(args.files):
            digest = await engine.compute_digest(artifact, args.algorithm)
            logger.debug("%s %s: %s", args.algorithm, artifact.name, digest)
            rows.append(
                {
                    "file": artifact.name,
                    "algorithm": args.algorithm,
                    "digest": digest,
                }
            )
            if not args.json:
                print(f"{digest}  {artifact.name}")

        if args.json:
            print_json(rows)
