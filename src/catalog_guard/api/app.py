"""
catalog_guard.api.app

FastAPI app factory for the catalog back office.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Build shared infrastructure once (DB engine, cache backend, authorization config) and
  dispose it on shutdown.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from catalog_guard import __version__
from catalog_guard.api.deps import Services
from catalog_guard.api.routers.albums import router as albums_router
from catalog_guard.api.routers.dev_auth import router as dev_auth_router
from catalog_guard.api.routers.health import router as health_router
from catalog_guard.api.routers.roles import router as roles_router
from catalog_guard.api.routers.users import router as users_router
from catalog_guard.auth.config import AuthorizationConfig, build_default_config
from catalog_guard.auth.evaluator import PolicyEvaluator
from catalog_guard.auth.policy_file import load_policy_file
from catalog_guard.cache.backends import CacheBackend, MemoryCacheBackend, RedisCacheBackend
from catalog_guard.catalog.service import CatalogService
from catalog_guard.db.init_db import init_db
from catalog_guard.db.repositories.albums import AlbumRepo
from catalog_guard.db.session import create_engine, create_sessionmaker
from catalog_guard.directory.sql import SqlPrincipalDirectory
from catalog_guard.membership.reconciler import MembershipReconciler
from catalog_guard.observability.logging import configure_logging, get_logger
from catalog_guard.observability.middleware import RequestContextMiddleware
from catalog_guard.settings import Settings

log = get_logger(__name__)


def build_authorization_config(settings: Settings) -> AuthorizationConfig:
    # Policy file entries override the built-in policies of the same name.
    extra = load_policy_file(settings.policy_file) if settings.policy_file is not None else None
    return build_default_config(extra)


def _build_cache_backend(settings: Settings) -> CacheBackend:
    if settings.cache_backend == "redis":
        return RedisCacheBackend.from_url(settings.redis_url, namespace=settings.redis_namespace)
    return MemoryCacheBackend()


def create_app(*, settings: Settings, cache_backend: CacheBackend | None = None) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(
        service_name=settings.service_name, level=settings.log_level, json_logs=settings.log_json
    )

    # Fail fast on a bad policy file: configuration errors surface before serving.
    authz_config = build_authorization_config(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, policies=sorted(authz_config.policies))
        engine = create_engine(settings)
        sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await init_db(engine)

        backend = cache_backend if cache_backend is not None else _build_cache_backend(settings)
        directory = SqlPrincipalDirectory(sessionmaker)
        app.state.services = Services(
            settings=settings,
            sessionmaker=sessionmaker,
            cache_backend=backend,
            directory=directory,
            evaluator=PolicyEvaluator(authz_config),
            reconciler=MembershipReconciler(
                directory,
                claim_types=settings.claim_types,
                timeout=settings.collaborator_timeout_seconds,
            ),
            catalog=CatalogService.from_settings(
                settings=settings, source=AlbumRepo(sessionmaker), backend=backend
            ),
        )
        try:
            yield
        finally:
            # Close only what this factory opened; an injected backend belongs to the caller.
            if cache_backend is None and isinstance(backend, RedisCacheBackend):
                await backend.close()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Catalog Guard",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(albums_router)
    app.include_router(roles_router)
    app.include_router(users_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Business rules live in auth/, cache/, catalog/ and membership/; this file only wires them.
