"""
tests.test_catalog

Album listing wire format and the catalog service's caller-side invalidation.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import pytest

from catalog_guard.cache.backends import MemoryCacheBackend
from catalog_guard.cache.store import CacheAsideStore
from catalog_guard.catalog.codec import AlbumListingCodec
from catalog_guard.catalog.models import AlbumDraft, AlbumRecord
from catalog_guard.catalog.service import CatalogService
from catalog_guard.errors import CacheCorruption

ALBUM = AlbumRecord(
    id=1,
    title="Blue",
    artist="Joni Mitchell",
    price=Decimal("9.99"),
    release_date=date(1971, 6, 22),
    cover_url="https://img.example/blue.jpg",
)


def test_listing_wire_shape() -> None:
    raw = AlbumListingCodec().encode([ALBUM])
    assert json.loads(raw) == [
        {
            "id": 1,
            "title": "Blue",
            "artist": "Joni Mitchell",
            "price": "9.99",
            "release_date": "1971-06-22",
            "cover_url": "https://img.example/blue.jpg",
        }
    ]
    assert AlbumListingCodec().decode(raw) == [ALBUM]


def test_decoding_ignores_whitespace() -> None:
    raw = b"""
    [ { "id": 1, "title": "Blue", "artist": "Joni Mitchell", "price": "9.99",
        "release_date": "1971-06-22", "cover_url": "https://img.example/blue.jpg" } ]
    """
    assert AlbumListingCodec().decode(raw) == [ALBUM]


def test_decoding_rejects_wrong_shape() -> None:
    with pytest.raises(ValueError):
        AlbumListingCodec().decode(b'[{"id": "one"}]')


class FakeAlbumSource:
    def __init__(self) -> None:
        self.albums: dict[int, AlbumRecord] = {}
        self.list_calls = 0

    async def list_all(self) -> list[AlbumRecord]:
        self.list_calls += 1
        return [self.albums[k] for k in sorted(self.albums)]

    async def get(self, album_id: int) -> AlbumRecord | None:
        return self.albums.get(album_id)

    async def add(self, draft: AlbumDraft) -> AlbumRecord:
        album = AlbumRecord(id=len(self.albums) + 1, **draft.model_dump())
        self.albums[album.id] = album
        return album

    async def update(self, album_id: int, draft: AlbumDraft) -> AlbumRecord | None:
        if album_id not in self.albums:
            return None
        self.albums[album_id] = AlbumRecord(id=album_id, **draft.model_dump())
        return self.albums[album_id]

    async def delete(self, album_id: int) -> bool:
        return self.albums.pop(album_id, None) is not None


def _draft(title: str) -> AlbumDraft:
    return AlbumDraft(title=title, artist="Various", price=Decimal("5.00"), release_date=date(2020, 1, 1))


def _service(clock) -> tuple[CatalogService, FakeAlbumSource, MemoryCacheBackend]:
    source = FakeAlbumSource()
    backend = MemoryCacheBackend(clock=clock)
    store = CacheAsideStore(backend, AlbumListingCodec(), clock=clock)
    return CatalogService(source=source, store=store, listing_ttl=60), source, backend


@pytest.mark.asyncio
async def test_listing_is_served_from_cache(clock) -> None:
    service, source, _ = _service(clock)
    await service.add_album(_draft("A"))

    first = await service.list_albums()
    second = await service.list_albums()
    assert first == second
    assert [a.title for a in second] == ["A"]
    assert source.list_calls == 1


@pytest.mark.asyncio
async def test_every_write_invalidates_the_listing(clock) -> None:
    service, source, _ = _service(clock)
    created = await service.add_album(_draft("A"))
    await service.list_albums()

    await service.update_album(created.id, _draft("A2"))
    assert [a.title for a in await service.list_albums()] == ["A2"]

    await service.delete_album(created.id)
    assert await service.list_albums() == []
    assert source.list_calls == 3


@pytest.mark.asyncio
async def test_corrupt_listing_surfaces_until_refreshed(clock) -> None:
    service, _, backend = _service(clock)
    backend.raw_put("albums-of-today", b"broken")

    with pytest.raises(CacheCorruption):
        await service.list_albums()

    await service.refresh_listing()
    assert await service.list_albums() == []


@pytest.mark.asyncio
async def test_missing_album_is_not_an_error(clock) -> None:
    service, _, _ = _service(clock)
    assert await service.get_album(42) is None
    assert await service.update_album(42, _draft("X")) is None
    assert await service.delete_album(42) is False
