"""
catalog_guard.auth

Authentication/authorization package.

Responsibilities:
- Principal snapshot model and requirement variants.
- Handler registry, policy registry, and the policy evaluator.
- JWT helpers and FastAPI dependencies for the HTTP adapter.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The evaluator has no FastAPI dependency; only `auth.deps` touches the web layer.
