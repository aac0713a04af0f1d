"""
catalog_guard.catalog.models

Album record types.

Responsibilities:
- `AlbumRecord`: one catalog entry as returned to callers and stored in the cache.
- `AlbumDraft`: the writable fields for create/update.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field


class AlbumDraft(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=256)
    artist: str = Field(min_length=1, max_length=256)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    release_date: date
    cover_url: str = ""


class AlbumRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    title: str
    artist: str
    price: Decimal
    release_date: date
    cover_url: str


class AlbumSource(Protocol):
    """Authoritative album storage (the cache loader reads from here)."""

    async def list_all(self) -> list[AlbumRecord]: ...

    async def get(self, album_id: int) -> AlbumRecord | None: ...

    async def add(self, draft: AlbumDraft) -> AlbumRecord: ...

    async def update(self, album_id: int, draft: AlbumDraft) -> AlbumRecord | None: ...

    async def delete(self, album_id: int) -> bool: ...
