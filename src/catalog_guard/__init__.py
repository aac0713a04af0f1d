"""
catalog_guard

Top-level package for the catalog back-office access-control core.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file minimal; subpackages are imported explicitly by their callers.
