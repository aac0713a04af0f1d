"""
catalog_guard.catalog.service

Catalog service (cache-aside listing + CRUD).

Responsibilities:
- Serve the album listing through `CacheAsideStore` under a single well-known key.
- Delegate CRUD to the `AlbumSource` and invalidate the listing after every write.
"""

from __future__ import annotations

import asyncio

from catalog_guard.cache.backends import CacheBackend
from catalog_guard.cache.store import CacheAsideStore
from catalog_guard.catalog.codec import AlbumListingCodec
from catalog_guard.catalog.models import AlbumDraft, AlbumRecord, AlbumSource
from catalog_guard.observability.logging import get_logger
from catalog_guard.outcomes import Cancelled
from catalog_guard.settings import Settings

log = get_logger(__name__)


class CatalogService:
    def __init__(
        self,
        *,
        source: AlbumSource,
        store: CacheAsideStore[list[AlbumRecord]],
        listing_key: str = "albums-of-today",
        listing_ttl: float | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._listing_key = listing_key
        self._listing_ttl = listing_ttl

    @classmethod
    def from_settings(
        cls, *, settings: Settings, source: AlbumSource, backend: CacheBackend
    ) -> CatalogService:
        store: CacheAsideStore[list[AlbumRecord]] = CacheAsideStore(
            backend,
            AlbumListingCodec(),
            coalesce=settings.cache_coalesce_misses,
            timeout=settings.collaborator_timeout_seconds,
        )
        return cls(
            source=source,
            store=store,
            listing_key=settings.catalog_cache_key,
            listing_ttl=settings.catalog_cache_ttl_seconds,
        )

    async def list_albums(self, *, cancel: asyncio.Event | None = None) -> list[AlbumRecord] | Cancelled:
        return await self._store.get_or_load(
            self._listing_key, self._source.list_all, self._listing_ttl, cancel=cancel
        )

    async def get_album(self, album_id: int) -> AlbumRecord | None:
        return await self._source.get(album_id)

    async def add_album(self, draft: AlbumDraft) -> AlbumRecord:
        album = await self._source.add(draft)
        await self._invalidate_listing()
        log.info("catalog.album_added", album_id=album.id)
        return album

    async def update_album(self, album_id: int, draft: AlbumDraft) -> AlbumRecord | None:
        album = await self._source.update(album_id, draft)
        if album is not None:
            await self._invalidate_listing()
        return album

    async def delete_album(self, album_id: int) -> bool:
        deleted = await self._source.delete(album_id)
        if deleted:
            await self._invalidate_listing()
            log.info("catalog.album_deleted", album_id=album_id)
        return deleted

    async def refresh_listing(self) -> None:
        """Drop a corrupt or outdated listing so the next read reloads it."""

        await self._invalidate_listing()

    async def _invalidate_listing(self) -> None:
        await self._store.invalidate(self._listing_key)


# --- Module Notes -----------------------------------------------------------
# Writers invalidate after the source write commits; a reader racing the write may still
# repopulate the old listing until the next invalidation or TTL expiry.
