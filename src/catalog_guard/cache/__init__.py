"""
catalog_guard.cache

Cache-aside store and its backends.

Responsibilities:
- `CacheAsideStore`: get-or-populate with time-based freshness.
- Backends: in-process memory and Redis (`redis.asyncio`).
"""

# Package marker.
