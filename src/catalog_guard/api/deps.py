"""
catalog_guard.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide settings, DB sessions, and the services built at start-up.
- Translate membership outcomes into HTTP errors.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from catalog_guard.auth.evaluator import PolicyEvaluator
from catalog_guard.cache.backends import CacheBackend
from catalog_guard.catalog.service import CatalogService
from catalog_guard.directory.base import PrincipalDirectory
from catalog_guard.membership.reconciler import MembershipReconciler
from catalog_guard.outcomes import Cancelled, Failure, FailureKind, MembershipOutcome
from catalog_guard.settings import Settings


@dataclass(slots=True)
class Services:
    """Everything built once at start-up and shared by requests."""

    settings: Settings
    sessionmaker: async_sessionmaker[AsyncSession]
    cache_backend: CacheBackend
    directory: PrincipalDirectory
    evaluator: PolicyEvaluator
    reconciler: MembershipReconciler
    catalog: CatalogService


def services(request: Request) -> Services:
    return request.app.state.services  # type: ignore[attr-defined]


def settings_dep(svc: Services = Depends(services)) -> Settings:
    return svc.settings


async def db_session(svc: Services = Depends(services)) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the caller.
    async with svc.sessionmaker() as session:
        yield session


_FAILURE_STATUS: dict[FailureKind, int] = {
    FailureKind.duplicate_role: HTTP_409_CONFLICT,
    FailureKind.not_a_member: HTTP_409_CONFLICT,
    FailureKind.role_not_found: HTTP_404_NOT_FOUND,
    FailureKind.principal_not_found: HTTP_404_NOT_FOUND,
    # Literal: the Starlette constant for 422 was renamed across releases.
    FailureKind.invalid_name: 422,
    FailureKind.directory_failure: HTTP_502_BAD_GATEWAY,
}


def raise_for_outcome(outcome: MembershipOutcome) -> None:
    if isinstance(outcome, Cancelled):
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Operation cancelled")
    if isinstance(outcome, Failure):
        raise HTTPException(
            status_code=_FAILURE_STATUS[outcome.kind],
            detail={"kind": outcome.kind.value, "reason": outcome.reason},
        )


# --- Module Notes -----------------------------------------------------------
# Status codes live only in the API layer; the core returns plain outcome values.
