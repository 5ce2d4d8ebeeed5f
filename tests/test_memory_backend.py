from __future__ import annotations

import pytest

from coordstate.backends import MemoryBackend, StateBackend
from coordstate.exceptions import StoreConflictError


@pytest.mark.asyncio
async def test_fetch_missing_key_yields_empty_placeholder() -> None:
    backend = MemoryBackend()
    variable = await backend.fetch("/missing")

    assert variable.name == "/missing"
    assert variable.is_empty
    assert variable.version == 0
    assert len(backend) == 0


@pytest.mark.asyncio
async def test_store_bumps_version() -> None:
    backend = MemoryBackend()

    first = await backend.store((await backend.fetch("k")).mutate(b"1"))
    second = await backend.store((await backend.fetch("k")).mutate(b"2"))

    assert (first.version, second.version) == (1, 2)
    assert (await backend.fetch("k")).value == b"2"
    assert backend.names() == ["k"]


@pytest.mark.asyncio
async def test_stale_store_is_rejected() -> None:
    backend = MemoryBackend()
    stale = await backend.fetch("k")
    await backend.store(stale.mutate(b"winner"))

    with pytest.raises(StoreConflictError) as exc_info:
        await backend.store(stale.mutate(b"loser"))

    assert exc_info.value.key == "k"
    assert exc_info.value.version == 0
    assert (await backend.fetch("k")).value == b"winner"


def test_memory_backend_satisfies_protocol() -> None:
    assert isinstance(MemoryBackend(), StateBackend)
