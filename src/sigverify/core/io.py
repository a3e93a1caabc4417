"""Bounded reads of verification artifacts.

Every read of artifact content goes through this module. File-backed
artifacts are read with aiofiles so each read is a suspension point for
the event loop; in-memory artifacts are sliced and yield control between
chunks the same way.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import aiofiles

from sigverify.exceptions import ArtifactReadError
from sigverify.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sigverify.domain.types import VerificationArtifact

logger = get_logger(__name__)


async def read_prefix(artifact: VerificationArtifact, size: int) -> bytes:
    """Read at most ``size`` bytes from the start of an artifact.

    Raises:
        ArtifactReadError: If the file cannot be read

    """
    if artifact.content is not None:
        return artifact.content[:size]
    try:
        async with aiofiles.open(artifact.path, "rb") as f:
            return await f.read(size)
    except OSError as e:
        raise ArtifactReadError(str(e), artifact.name) from e


async def read_all(artifact: VerificationArtifact) -> bytes:
    """Read a whole artifact into memory.

    Only used for artifacts that are small by nature (keys, signatures,
    clearsigned messages) or below the text threshold.

    Raises:
        ArtifactReadError: If the file cannot be read

    """
    if artifact.content is not None:
        return artifact.content
    try:
        async with aiofiles.open(artifact.path, "rb") as f:
            return await f.read()
    except OSError as e:
        raise ArtifactReadError(str(e), artifact.name) from e


async def iter_chunks(
    artifact: VerificationArtifact, chunk_size: int
) -> AsyncIterator[bytes]:
    """Yield the artifact content in chunks of at most ``chunk_size``.

    The generator is pull-based: nothing is read until the consumer asks
    for the next chunk, so at most one chunk is held at a time.

    Raises:
        ArtifactReadError: If the file cannot be opened or read

    """
    if chunk_size <= 0:
        msg = f"chunk_size must be positive, got {chunk_size}"
        raise ValueError(msg)

    if artifact.content is not None:
        view = memoryview(artifact.content)
        for offset in range(0, len(view), chunk_size):
            await asyncio.sleep(0)
            yield bytes(view[offset : offset + chunk_size])
        return

    try:
        async with aiofiles.open(artifact.path, "rb") as f:
            while chunk := await f.read(chunk_size):
                yield chunk
    except OSError as e:
        logger.debug("Read of %s failed: %s", artifact.name, e)
        raise ArtifactReadError(str(e), artifact.name) from e
