"""
catalog_guard.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Persistence is a collaborator: the core only sees `PrincipalDirectory` and `AlbumSource`.
