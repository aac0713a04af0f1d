"""
catalog_guard.api.routers.albums

Album catalog endpoints.

Responsibilities:
- Serve the cached listing and single albums.
- Create/update/delete albums (each write invalidates the cached listing).
- Gate every route behind the `QualifiedUser` policy.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_204_NO_CONTENT,
    HTTP_404_NOT_FOUND,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from catalog_guard.api.deps import Services, services
from catalog_guard.auth.deps import require_policy
from catalog_guard.catalog.models import AlbumDraft, AlbumRecord
from catalog_guard.errors import CacheCorruption
from catalog_guard.observability.logging import get_logger
from catalog_guard.outcomes import Cancelled

log = get_logger(__name__)

router = APIRouter(
    prefix="/v1/albums",
    tags=["albums"],
    dependencies=[Depends(require_policy("QualifiedUser"))],
)


@router.get("", response_model=list[AlbumRecord])
async def list_albums(svc: Services = Depends(services)) -> list[AlbumRecord]:
    try:
        albums = await svc.catalog.list_albums()
    except CacheCorruption as e:
        # The store never heals a corrupt entry by itself; drop it and read through once.
        log.warning("catalog.listing_corrupt", key=e.key, detail=e.detail)
        await svc.catalog.refresh_listing()
        albums = await svc.catalog.list_albums()
    if isinstance(albums, Cancelled):
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Catalog unavailable")
    return albums


@router.get("/{album_id}", response_model=AlbumRecord)
async def get_album(album_id: int, svc: Services = Depends(services)) -> AlbumRecord:
    album = await svc.catalog.get_album(album_id)
    if album is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Album not found")
    return album


@router.post("", response_model=AlbumRecord, status_code=HTTP_201_CREATED)
async def create_album(body: AlbumDraft, svc: Services = Depends(services)) -> AlbumRecord:
    return await svc.catalog.add_album(body)


@router.put("/{album_id}", response_model=AlbumRecord)
async def update_album(
    album_id: int, body: AlbumDraft, svc: Services = Depends(services)
) -> AlbumRecord:
    album = await svc.catalog.update_album(album_id, body)
    if album is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Album not found")
    return album


@router.delete("/{album_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_album(album_id: int, svc: Services = Depends(services)) -> Response:
    if not await svc.catalog.delete_album(album_id):
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Album not found")
    return Response(status_code=HTTP_204_NO_CONTENT)
