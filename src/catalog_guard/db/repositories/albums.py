"""
catalog_guard.db.repositories.albums

Repository for `Album` entities.

Responsibilities:
- CRUD for catalog albums.
- Map ORM rows onto `AlbumRecord`, the cached wire shape.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog_guard.catalog.models import AlbumDraft, AlbumRecord
from catalog_guard.db.models import Album


def _to_record(album: Album) -> AlbumRecord:
    return AlbumRecord(
        id=album.id,
        title=album.title,
        artist=album.artist,
        price=album.price,
        release_date=album.release_date,
        cover_url=album.cover_url,
    )


class AlbumRepo:
    """
    `AlbumSource` over a session factory.

    Each call owns a short session and commits its own write, so the repository can be
    shared by concurrent requests.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_all(self) -> list[AlbumRecord]:
        async with self._session_factory() as session:
            rows = (await session.execute(select(Album).order_by(Album.id))).scalars().all()
            return [_to_record(a) for a in rows]

    async def get(self, album_id: int) -> AlbumRecord | None:
        async with self._session_factory() as session:
            album = await session.get(Album, album_id)
            return _to_record(album) if album is not None else None

    async def add(self, draft: AlbumDraft) -> AlbumRecord:
        async with self._session_factory() as session:
            album = Album(**draft.model_dump())
            session.add(album)
            await session.commit()
            return _to_record(album)

    async def update(self, album_id: int, draft: AlbumDraft) -> AlbumRecord | None:
        async with self._session_factory() as session:
            album = await session.get(Album, album_id, with_for_update=True)
            if album is None:
                return None
            for key, value in draft.model_dump().items():
                setattr(album, key, value)
            await session.commit()
            return _to_record(album)

    async def delete(self, album_id: int) -> bool:
        async with self._session_factory() as session:
            album = await session.get(Album, album_id)
            if album is None:
                return False
            await session.delete(album)
            await session.commit()
            return True
