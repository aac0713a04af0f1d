"""
catalog_guard.cache.store

Cache-aside read-through store.

Responsibilities:
- `get_or_load`: return a fresh cached value, or call the loader and write the result back.
- `invalidate`: drop an entry unconditionally.
- Report undecodable entries as `CacheCorruption` (never as a miss).

Stored bytes are `<header JSON>\\n<payload>`; the header carries the insertion time and
TTL, the payload is whatever the codec produces.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from catalog_guard.cache.backends import CacheBackend
from catalog_guard.cancellation import OperationCancelled, guarded
from catalog_guard.errors import CacheCorruption
from catalog_guard.observability.logging import get_logger
from catalog_guard.outcomes import CANCELLED, Cancelled

log = get_logger(__name__)

T = TypeVar("T")

_SEPARATOR = b"\n"


class Codec(Protocol[T]):
    def encode(self, value: T) -> bytes: ...

    def decode(self, raw: bytes) -> T: ...


class _EntryHeader(BaseModel):
    inserted_at: float
    ttl: float | None = None


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    payload: bytes
    inserted_at: float
    ttl: float | None = None

    def is_fresh(self, now: float, ttl: float | None = None) -> bool:
        effective = ttl if ttl is not None else self.ttl
        if effective is None:
            return True
        return now - self.inserted_at < effective

    def pack(self) -> bytes:
        header = _EntryHeader(inserted_at=self.inserted_at, ttl=self.ttl)
        return header.model_dump_json().encode() + _SEPARATOR + self.payload

    @classmethod
    def unpack(cls, key: str, raw: bytes) -> CacheEntry:
        head, sep, payload = raw.partition(_SEPARATOR)
        if not sep:
            raise CacheCorruption(key, "missing entry header")
        try:
            header = _EntryHeader.model_validate_json(head)
        except ValidationError as e:
            raise CacheCorruption(key, f"bad entry header: {e}") from e
        return cls(key=key, payload=payload, inserted_at=header.inserted_at, ttl=header.ttl)


class CacheAsideStore(Generic[T]):
    """
    Get-or-populate over a shared backend.

    No client-side locking: concurrent misses each run the loader and the last write
    wins. With `coalesce=True` concurrent misses on one key share a single load.
    """

    def __init__(
        self,
        backend: CacheBackend,
        codec: Codec[T],
        *,
        clock: Callable[[], float] = time.time,
        coalesce: bool = False,
        timeout: float | None = None,
    ) -> None:
        self._backend = backend
        self._codec = codec
        self._clock = clock
        self._coalesce = coalesce
        self._timeout = timeout
        self._inflight: dict[str, asyncio.Task[T]] = {}

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        ttl: float | None = None,
        *,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> T | Cancelled:
        try:
            return await guarded(
                self._get_or_load(key, loader, ttl),
                cancel=cancel,
                timeout=timeout if timeout is not None else self._timeout,
            )
        except OperationCancelled as e:
            log.info("cache.cancelled", key=key, detail=str(e))
            return CANCELLED

    async def invalidate(self, key: str) -> None:
        await self._backend.delete(key)
        log.info("cache.invalidated", key=key)

    async def _get_or_load(
        self, key: str, loader: Callable[[], Awaitable[T]], ttl: float | None
    ) -> T:
        raw = await self._backend.get(key)
        if raw is not None:
            entry = CacheEntry.unpack(key, raw)
            if entry.is_fresh(self._clock(), ttl):
                return self._decode(entry)
            log.debug("cache.stale", key=key, inserted_at=entry.inserted_at)
        else:
            log.debug("cache.miss", key=key)

        if not self._coalesce:
            return await self._load_and_store(key, loader, ttl)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load_and_store(key, loader, ttl))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._inflight.pop(k, None))
        # Shielded so one abandoned waiter does not cancel the load for the others.
        return await asyncio.shield(task)

    def _decode(self, entry: CacheEntry) -> T:
        try:
            value = self._codec.decode(entry.payload)
        except ValueError as e:
            log.error("cache.corrupt", key=entry.key, error=str(e))
            raise CacheCorruption(entry.key, str(e)) from e
        log.debug("cache.hit", key=entry.key)
        return value

    async def _load_and_store(
        self, key: str, loader: Callable[[], Awaitable[T]], ttl: float | None
    ) -> T:
        value = await loader()
        entry = CacheEntry(
            key=key,
            payload=self._codec.encode(value),
            inserted_at=self._clock(),
            ttl=ttl,
        )
        await self._backend.set(key, entry.pack(), ttl)
        return value


# --- Module Notes -----------------------------------------------------------
# Invalidation is the writer's job: nothing here watches the underlying data.
