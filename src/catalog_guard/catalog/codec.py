"""
catalog_guard.catalog.codec

Wire codec for the cached catalog listing.

Responsibilities:
- Encode an ordered album sequence as a JSON array of records.
- Decode it back exactly (order, ids, decimal prices, ISO dates), tolerating whitespace.

Decode errors surface as `ValueError` (pydantic `ValidationError`), which the cache
store reports as corruption.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import TypeAdapter

from catalog_guard.catalog.models import AlbumRecord

_LISTING = TypeAdapter(list[AlbumRecord])


class AlbumListingCodec:
    def encode(self, albums: Sequence[AlbumRecord]) -> bytes:
        return _LISTING.dump_json(list(albums))

    def decode(self, raw: bytes) -> list[AlbumRecord]:
        return _LISTING.validate_json(raw)
