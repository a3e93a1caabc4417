"""Top-level package for sigverify.

Offline OpenPGP signature and checksum verification.

License: GPL-3.0
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sigverify")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "dev"
