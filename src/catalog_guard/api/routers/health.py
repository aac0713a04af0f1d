"""
catalog_guard.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) over the collaborators every request depends on:
  the database (principal directory + catalog) and the cache backend (album listing).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.status import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from catalog_guard.api.deps import Services, services
from catalog_guard.errors import CacheBackendError
from catalog_guard.observability.logging import get_logger

log = get_logger(__name__)

router = APIRouter()

# Never written; a GET of an absent key is enough to prove the backend answers.
_READINESS_KEY = "readyz"


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(svc: Services = Depends(services)) -> JSONResponse:
    checks: dict[str, str] = {}

    try:
        async with svc.sessionmaker() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        log.warning("readyz.database_unavailable", error=str(e))
        checks["database"] = "unavailable"

    try:
        await svc.cache_backend.get(_READINESS_KEY)
        checks["cache"] = "ok"
    except CacheBackendError as e:
        log.warning("readyz.cache_unavailable", error=str(e))
        checks["cache"] = "unavailable"

    ready = all(v == "ok" for v in checks.values())
    body: dict[str, Any] = {"status": "ready" if ready else "not_ready", "checks": checks}
    return JSONResponse(status_code=HTTP_200_OK if ready else HTTP_503_SERVICE_UNAVAILABLE, content=body)


# --- Module Notes -----------------------------------------------------------
# A cache outage makes the listing unservable, so it fails readiness rather than liveness.
