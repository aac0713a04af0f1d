"""
catalog_guard.catalog

Album catalog collaborator.

Responsibilities:
- Album record types and the cached listing wire codec.
- Catalog service: cached listing plus CRUD with listing invalidation.
"""

# Package marker.
