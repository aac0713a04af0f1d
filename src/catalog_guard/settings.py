"""
catalog_guard.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single settings object injected across layers.

    Authorization policies themselves are not settings: they are built once into an
    `AuthorizationConfig` at start-up (optionally from `policy_file`).
    """

    model_config = SettingsConfigDict(env_prefix="CATALOG_GUARD_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "catalog-guard"
    log_level: str = "INFO"
    # False switches to structlog's console renderer for local development.
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "catalog-guard"
    jwt_audience: str = "catalog-admin"
    jwt_secret: str = Field(default="dev-only-secret-change-me-in-every-deployment", repr=False)

    # Persistence (principal directory + album catalog)
    database_url: str = "sqlite+aiosqlite:///./catalog_guard.db"

    # Cache-aside store
    cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_namespace: str = "redis-for-albums"
    catalog_cache_key: str = "albums-of-today"
    catalog_cache_ttl_seconds: float | None = 60.0
    cache_coalesce_misses: bool = False

    # Upper bound for any single directory/cache round trip; None disables the deadline.
    collaborator_timeout_seconds: float | None = 5.0

    # Authorization
    policy_file: Path | None = None
    claim_types: list[str] = Field(default_factory=lambda: ["EditAlbums"])


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(env="test", ...)` directly instead of going through the cache.
