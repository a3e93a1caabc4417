"""Classify command handler for sigverify CLI."""
# ruff: noqa: T201

from argparse import Namespace

from sigverify.cli.display import print_json
from sigverify.core.classifier import classify_artifact

from .base import BaseCommandHandler
from .helpers import open_artifacts


class ClassifyHandler(BaseCommandHandler):
    """Handler for the classify command."""

    async def execute(self, args: Namespace) -> None:
        """Print the detected kind of each file."""
        rows = []
        for artifact in open_artifacts(args.files):
            classification = await classify_artifact(artifact)
            rows.append(
                {
                    "file": artifact.name,
                    "kind": classification.kind.value,
                    "label": classification.kind.label,
                    "hint": classification.hint,
                }
            )

        if args.json:
            print_json(rows)
            return
        for row in rows:
            line = f"{row['file']}: {row['label']}"
            if row["hint"]:
                line += f" ({row['hint']})"
            print(line)
