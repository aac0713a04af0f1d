"""
catalog_guard.cache.backends

Key/byte-blob cache backends.

Responsibilities:
- Define the backend protocol consumed by `CacheAsideStore`.
- In-process backend (tests, single-process dev).
- Redis backend for shared deployments.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from catalog_guard.errors import CacheBackendError


class CacheBackend(Protocol):
    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes, ttl: float | None) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryCacheBackend:
    """Dictionary backend; expiry is checked lazily on read."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: dict[str, tuple[bytes, float | None]] = {}

    async def get(self, key: str) -> bytes | None:
        await asyncio.sleep(0)
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            self._data.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: bytes, ttl: float | None) -> None:
        await asyncio.sleep(0)
        expires_at = self._clock() + ttl if ttl is not None else None
        self._data[key] = (value, expires_at)

    async def delete(self, key: str) -> None:
        await asyncio.sleep(0)
        self._data.pop(key, None)

    def raw_put(self, key: str, value: bytes) -> None:
        """Write bytes verbatim, bypassing expiry (tests use this to plant bad entries)."""

        self._data[key] = (value, None)


class RedisCacheBackend:
    def __init__(self, redis: Redis, *, namespace: str = "") -> None:
        self._redis = redis
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, *, namespace: str = "") -> RedisCacheBackend:
        redis = Redis.from_url(
            url,
            decode_responses=False,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        return cls(redis, namespace=namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else key

    async def get(self, key: str) -> bytes | None:
        try:
            return await self._redis.get(self._key(key))
        except RedisError as e:
            raise CacheBackendError(f"redis GET failed: {e}") from e

    async def set(self, key: str, value: bytes, ttl: float | None) -> None:
        px = max(1, int(ttl * 1000)) if ttl is not None else None
        try:
            await self._redis.set(self._key(key), value, px=px)
        except RedisError as e:
            raise CacheBackendError(f"redis SET failed: {e}") from e

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(self._key(key))
        except RedisError as e:
            raise CacheBackendError(f"redis DEL failed: {e}") from e

    async def close(self) -> None:
        await self._redis.aclose()


# --- Module Notes -----------------------------------------------------------
# Backends enforce their own expiry too; the store still checks freshness from the entry
# header so a backend without TTL support behaves the same.
