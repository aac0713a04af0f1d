"""
catalog_guard.api

HTTP adapter (FastAPI) over the access-control core.

Responsibilities:
- App factory and composition root.
- Map decisions/outcomes onto HTTP status codes (the core knows none).
"""

# Package marker.
