"""
catalog_guard.errors

Exception types raised by the access-control core.

Responsibilities:
- Separate configuration/data-integrity faults (raised) from substantive negative
  outcomes (returned as `Deny` / `Failure` values, see `catalog_guard.outcomes`).
"""

from __future__ import annotations


class CatalogGuardError(Exception):
    """Base class for all errors raised by this package."""


class PolicyConfigurationError(CatalogGuardError):
    """Raised at start-up when the policy/handler configuration is invalid."""


class UnknownPolicy(CatalogGuardError):
    def __init__(self, policy_name: str) -> None:
        self.policy_name = policy_name
        super().__init__(f"Unknown policy '{policy_name}'")


class CacheCorruption(CatalogGuardError):
    """
    A cache entry exists but cannot be decoded.

    Never treated as a miss: the caller decides whether to invalidate and retry.
    """

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(f"Corrupt cache entry '{key}': {detail}")


class CacheBackendError(CatalogGuardError):
    """The cache backend itself failed (connection, protocol, ...)."""


# --- Module Notes -----------------------------------------------------------
# Nothing in this package retries on these errors; retry policy belongs to the caller.
