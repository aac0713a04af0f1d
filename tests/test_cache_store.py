"""
tests.test_cache_store

Cache-aside store behavior: hits, misses, TTL freshness, corruption, invalidation,
optional miss coalescing and cancellation.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from catalog_guard.cache.backends import MemoryCacheBackend
from catalog_guard.cache.store import CacheAsideStore, CacheEntry
from catalog_guard.errors import CacheCorruption
from catalog_guard.outcomes import Cancelled


class JsonCodec:
    def encode(self, value: list[int]) -> bytes:
        return json.dumps(value).encode()

    def decode(self, raw: bytes) -> list[int]:
        return json.loads(raw)


class CountingLoader:
    def __init__(self, value: list[int]) -> None:
        self.value = value
        self.calls = 0

    async def __call__(self) -> list[int]:
        self.calls += 1
        await asyncio.sleep(0)
        return list(self.value)


def _store(clock, **kwargs) -> tuple[CacheAsideStore[list[int]], MemoryCacheBackend]:
    backend = MemoryCacheBackend(clock=clock)
    return CacheAsideStore(backend, JsonCodec(), clock=clock, **kwargs), backend


@pytest.mark.asyncio
async def test_hit_within_ttl_does_not_call_loader(clock) -> None:
    store, _ = _store(clock)
    loader = CountingLoader([1, 2])

    assert await store.get_or_load("k", loader, 60) == [1, 2]
    clock.advance(30)
    assert await store.get_or_load("k", loader, 60) == [1, 2]
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_stale_entry_is_reloaded(clock) -> None:
    store, _ = _store(clock)
    loader = CountingLoader([1])

    await store.get_or_load("k", loader, 60)
    clock.advance(61)
    loader.value = [2]
    assert await store.get_or_load("k", loader, 60) == [2]
    assert loader.calls == 2


@pytest.mark.asyncio
async def test_entry_without_ttl_never_goes_stale(clock) -> None:
    store, _ = _store(clock)
    loader = CountingLoader([7])

    await store.get_or_load("k", loader)
    clock.advance(10_000_000)
    await store.get_or_load("k", loader)
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_freshness_comes_from_entry_header(clock) -> None:
    backend = MemoryCacheBackend(clock=clock)
    store = CacheAsideStore(backend, JsonCodec(), clock=clock)
    # Planted without backend expiry: only the header decides freshness.
    backend.raw_put("k", CacheEntry(key="k", payload=b"[9]", inserted_at=clock() - 120, ttl=60).pack())
    loader = CountingLoader([1])

    assert await store.get_or_load("k", loader) == [1]
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_corrupt_payload_raises_and_loader_is_not_called(clock) -> None:
    store, backend = _store(clock)
    backend.raw_put("k", CacheEntry(key="k", payload=b"{not json", inserted_at=clock()).pack())
    loader = CountingLoader([1])

    with pytest.raises(CacheCorruption) as exc:
        await store.get_or_load("k", loader, 60)
    assert exc.value.key == "k"
    assert loader.calls == 0


@pytest.mark.asyncio
async def test_missing_header_is_corruption(clock) -> None:
    store, backend = _store(clock)
    backend.raw_put("k", b"garbage")

    with pytest.raises(CacheCorruption):
        await store.get_or_load("k", CountingLoader([1]), 60)


@pytest.mark.asyncio
async def test_invalidate_forces_reload(clock) -> None:
    store, _ = _store(clock)
    loader = CountingLoader([1])

    await store.get_or_load("k", loader, 60)
    await store.invalidate("k")
    await store.get_or_load("k", loader, 60)
    assert loader.calls == 2


@pytest.mark.asyncio
async def test_invalidate_missing_key_is_harmless(clock) -> None:
    store, _ = _store(clock)
    await store.invalidate("absent")


@pytest.mark.asyncio
async def test_loader_error_propagates_and_nothing_is_cached(clock) -> None:
    store, backend = _store(clock)

    async def failing() -> list[int]:
        raise RuntimeError("db down")

    with pytest.raises(RuntimeError):
        await store.get_or_load("k", failing, 60)
    assert await backend.get("k") is None


@pytest.mark.asyncio
async def test_concurrent_misses_each_load_by_default(clock) -> None:
    store, _ = _store(clock)
    loader = CountingLoader([1])

    results = await asyncio.gather(*(store.get_or_load("k", loader, 60) for _ in range(3)))
    assert results == [[1], [1], [1]]
    assert loader.calls == 3


@pytest.mark.asyncio
async def test_coalesced_misses_share_one_load(clock) -> None:
    store, _ = _store(clock, coalesce=True)
    loader = CountingLoader([1])

    results = await asyncio.gather(*(store.get_or_load("k", loader, 60) for _ in range(3)))
    assert results == [[1], [1], [1]]
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_cancel_signal_returns_cancelled(clock) -> None:
    store, backend = _store(clock)
    cancel = asyncio.Event()
    cancel.set()

    result = await store.get_or_load("k", CountingLoader([1]), 60, cancel=cancel)
    assert isinstance(result, Cancelled)
    assert await backend.get("k") is None


@pytest.mark.asyncio
async def test_slow_loader_hits_deadline(clock) -> None:
    store, _ = _store(clock)

    async def slow() -> list[int]:
        await asyncio.sleep(10)
        return [1]

    assert isinstance(await store.get_or_load("k", slow, 60, timeout=0.01), Cancelled)
