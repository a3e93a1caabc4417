"""Command handlers for the sigverify CLI."""

from sigverify.cli.commands.base import BaseCommandHandler
from sigverify.cli.commands.check import CheckHandler
from sigverify.cli.commands.classify import ClassifyHandler
from sigverify.cli.commands.config import ConfigHandler
from sigverify.cli.commands.digest import DigestHandler
from sigverify.cli.commands.verify import VerifyHandler

__all__ = [
    "BaseCommandHandler",
    "CheckHandler",
    "ClassifyHandler",
    "ConfigHandler",
    "DigestHandler",
    "VerifyHandler",
]
