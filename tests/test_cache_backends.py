"""
tests.test_cache_backends

Backend contract checks that need no running server.
"""

from __future__ import annotations

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from catalog_guard.cache.backends import MemoryCacheBackend, RedisCacheBackend
from catalog_guard.errors import CacheBackendError


class RecordingRedis:
    def __init__(self, *, fail: bool = False) -> None:
        self.data: dict[str, bytes] = {}
        self.px: dict[str, int | None] = {}
        self.fail = fail
        self.closed = False

    async def get(self, key: str) -> bytes | None:
        if self.fail:
            raise RedisConnectionError("connection refused")
        return self.data.get(key)

    async def set(self, key: str, value: bytes, px: int | None = None) -> None:
        self.data[key] = value
        self.px[key] = px

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def aclose(self) -> None:
        self.closed = True


@pytest.mark.asyncio
async def test_redis_backend_namespaces_keys_and_converts_ttl() -> None:
    client = RecordingRedis()
    backend = RedisCacheBackend(client, namespace="redis-for-albums")  # type: ignore[arg-type]

    await backend.set("albums-of-today", b"payload", 1.5)
    assert client.data == {"redis-for-albums:albums-of-today": b"payload"}
    assert client.px["redis-for-albums:albums-of-today"] == 1500
    assert await backend.get("albums-of-today") == b"payload"

    await backend.delete("albums-of-today")
    assert await backend.get("albums-of-today") is None

    await backend.close()
    assert client.closed


@pytest.mark.asyncio
async def test_redis_errors_become_backend_errors() -> None:
    backend = RedisCacheBackend(RecordingRedis(fail=True))  # type: ignore[arg-type]
    with pytest.raises(CacheBackendError):
        await backend.get("k")


@pytest.mark.asyncio
async def test_memory_backend_expires_lazily(clock) -> None:
    backend = MemoryCacheBackend(clock=clock)
    await backend.set("k", b"v", 10)
    clock.advance(9)
    assert await backend.get("k") == b"v"
    clock.advance(1)
    assert await backend.get("k") is None
