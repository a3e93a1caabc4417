"""Tests for artifact reads."""

import pytest

from sigverify.core.io import iter_chunks, read_all, read_prefix
from sigverify.domain.types import VerificationArtifact
from sigverify.exceptions import ArtifactReadError

DATA = b"0123456789abcdefghij"


@pytest.fixture(params=["file", "memory"])
def artifact(request, write_file):
    if request.param == "file":
        return VerificationArtifact.from_path(write_file("data.bin", DATA))
    return VerificationArtifact.from_bytes(DATA, "data.bin")


@pytest.fixture
def missing(tmp_path):
    return VerificationArtifact.from_path(tmp_path / "gone.bin", size=10)


async def collect(artifact, chunk_size):
    return [chunk async for chunk in iter_chunks(artifact, chunk_size)]


@pytest.mark.asyncio
async def test_read_prefix(artifact):
    assert await read_prefix(artifact, 5) == b"01234"
    assert await read_prefix(artifact, 100) == DATA


@pytest.mark.asyncio
async def test_read_all(artifact):
    assert await read_all(artifact) == DATA


@pytest.mark.asyncio
async def test_iter_chunks(artifact):
    chunks = await collect(artifact, 8)
    assert [len(chunk) for chunk in chunks] == [8, 8, 4]
    assert b"".join(chunks) == DATA


@pytest.mark.asyncio
async def test_iter_chunks_empty():
    artifact = VerificationArtifact.from_bytes(b"")
    assert await collect(artifact, 8) == []


@pytest.mark.asyncio
async def test_iter_chunks_rejects_bad_size(artifact):
    with pytest.raises(ValueError, match="positive"):
        await collect(artifact, 0)


@pytest.mark.asyncio
async def test_missing_file(missing):
    with pytest.raises(ArtifactReadError, match="gone.bin"):
        await read_prefix(missing, 4)
    with pytest.raises(ArtifactReadError):
        await read_all(missing)
    with pytest.raises(ArtifactReadError):
        await collect(missing, 4)
