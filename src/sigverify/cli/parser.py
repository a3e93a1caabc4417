"""CLI argument parser for sigverify.

Handles parsing of command-line arguments and provides a clean
interface for defining CLI commands and their options.
"""

import argparse
from argparse import Namespace

from sigverify.config import Settings
from sigverify.constants import (
    HASH_BACKEND_CHOICES,
    SUPPORTED_HASH_ALGORITHMS,
)


class CLIParser:
    """Command-line argument parser for sigverify."""

    def __init__(self, settings: Settings) -> None:
        """Initialize the CLI parser with loaded settings.

        Args:
            settings: Loaded settings, used for option defaults

        """
        self.settings = settings

    def parse_args(self, argv: list[str] | None = None) -> Namespace:
        """Parse command-line arguments.

        Args:
            argv: Arguments to parse (sys.argv[1:] when omitted)

        Returns:
            Namespace: Parsed arguments namespace.

        """
        parser = self._create_main_parser()
        self._add_global_options(parser)
        self._add_subcommands(parser)
        return parser.parse_args(argv)

    def _create_main_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        return argparse.ArgumentParser(
            prog="sigverify",
            description="Offline OpenPGP signature and checksum verifier",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Verify a signed checksum manifest, then the files it lists
  %(prog)s verify --key release.asc --signed SHA256SUMS.asc \\
      --check ubuntu.iso

  # Verify a large file against its detached signature
  %(prog)s verify --key release.asc --signature ubuntu.iso.sig \\
      --data ubuntu.iso

  # Check files against a plain checksum manifest
  %(prog)s check --manifest SHA256SUMS ubuntu.iso

  # Print digests
  %(prog)s digest --algorithm sha512 ubuntu.iso
""",
        )

    def _add_global_options(self, parser: argparse.ArgumentParser) -> None:
        """Add options available before any subcommand."""
        parser.add_argument(
            "--version",
            action="store_true",
            help="Show version information and exit",
        )

    def _add_subcommands(self, parser: argparse.ArgumentParser) -> None:
        """Add all subcommands to the parser."""
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands"
        )
        self._add_classify_command(subparsers)
        self._add_digest_command(subparsers)
        self._add_verify_command(subparsers)
        self._add_check_command(subparsers)
        self._add_config_command(subparsers)

    @staticmethod
    def _add_json_option(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print results as JSON",
        )

    def _add_classify_command(
        self, subparsers: argparse._SubParsersAction
    ) -> None:
        """Add the classify command parser."""
        classify_parser = subparsers.add_parser(
            "classify",
            help="Detect what kind of artifact each file is",
        )
        classify_parser.add_argument(
            "files", nargs="+", metavar="FILE", help="Files to classify"
        )
        self._add_json_option(classify_parser)

    def _add_digest_command(
        self, subparsers: argparse._SubParsersAction
    ) -> None:
        """Add the digest command parser."""
        hashing = self.settings["hashing"]
        digest_parser = subparsers.add_parser(
            "digest",
            help="Print file digests in checksum manifest format",
        )
        digest_parser.add_argument(
            "files", nargs="+", metavar="FILE", help="Files to hash"
        )
        digest_parser.add_argument(
            "-a",
            "--algorithm",
            choices=SUPPORTED_HASH_ALGORITHMS,
            default=hashing["algorithm"],
            help="Hash algorithm (default: %(default)s)",
        )
        digest_parser.add_argument(
            "--backend",
            choices=HASH_BACKEND_CHOICES,
            default=hashing["backend"],
            help="Hash backend (default: %(default)s)",
        )
        self._add_json_option(digest_parser)

    def _add_verify_command(
        self, subparsers: argparse._SubParsersAction
    ) -> None:
        """Add the verify command parser."""
        verify_parser = subparsers.add_parser(
            "verify",
            help="Verify an OpenPGP signature with a public key",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
A verified clearsigned checksum manifest is loaded automatically, so
files given with --check are checked against it in the same run.
""",
        )
        verify_parser.add_argument(
            "-k",
            "--key",
            required=True,
            help="Public key file (armored or binary)",
        )
        signed = verify_parser.add_mutually_exclusive_group(required=True)
        signed.add_argument(
            "--signed",
            help="Clearsigned or inline signed message",
        )
        signed.add_argument(
            "--signature",
            help="Detached signature (requires --data)",
        )
        verify_parser.add_argument(
            "--data",
            help="File covered by the detached signature",
        )
        verify_parser.add_argument(
            "--check",
            nargs="+",
            metavar="FILE",
            default=[],
            help="Files to check against the verified manifest",
        )
        verify_parser.add_argument(
            "-y",
            "--yes",
            action="store_true",
            help="Check files even if the manifest does not list them",
        )
        verify_parser.add_argument(
            "--progress",
            action="store_true",
            help="Show progress on stderr",
        )
        self._add_json_option(verify_parser)

    def _add_check_command(
        self, subparsers: argparse._SubParsersAction
    ) -> None:
        """Add the check command parser."""
        check_parser = subparsers.add_parser(
            "check",
            help="Check files against a checksum manifest",
        )
        check_parser.add_argument(
            "-m",
            "--manifest",
            required=True,
            help="Checksum manifest (SHA256SUMS, BSD or name=hash format)",
        )
        check_parser.add_argument(
            "files", nargs="+", metavar="FILE", help="Files to check"
        )
        check_parser.add_argument(
            "-y",
            "--yes",
            action="store_true",
            help="Check files even if the manifest does not list them",
        )
        check_parser.add_argument(
            "--progress",
            action="store_true",
            help="Show progress on stderr",
        )
        self._add_json_option(check_parser)

    def _add_config_command(
        self, subparsers: argparse._SubParsersAction
    ) -> None:
        """Add the config command parser."""
        config_parser = subparsers.add_parser(
            "config", help="Manage configuration"
        )
        config_group = config_parser.add_mutually_exclusive_group(
            required=True
        )
        config_group.add_argument(
            "--show", action="store_true", help="Show current configuration"
        )
        config_group.add_argument(
            "--reset", action="store_true", help="Reset to default values"
        )
