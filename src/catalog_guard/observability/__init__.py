"""
catalog_guard.observability

Logging and request-context helpers.

Responsibilities:
- structlog configuration (JSON in prod, console in dev).
- Request-id middleware for the HTTP adapter.
"""

# Package marker.
