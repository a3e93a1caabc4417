"""Command-line interface for sigverify."""

from sigverify.cli.parser import CLIParser
from sigverify.cli.runner import CLIRunner

__all__ = ["CLIParser", "CLIRunner"]
