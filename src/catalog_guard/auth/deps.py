"""
catalog_guard.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a principal id.
- Enforce a named policy via a reusable dependency factory.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN, HTTP_503_SERVICE_UNAVAILABLE

from catalog_guard.api.deps import Services, services, settings_dep
from catalog_guard.auth.jwt import JwtConfig, JwtValidationError, decode_subject
from catalog_guard.outcomes import Cancelled, Deny
from catalog_guard.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def get_principal_id(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> str:
    # Authn: require a bearer token.
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        return decode_subject(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e


def require_policy(policy_name: str) -> Callable[..., Awaitable[str]]:
    async def _dep(
        principal_id: str = Depends(get_principal_id),
        svc: Services = Depends(services),
    ) -> str:
        # Authz: the token only names the caller; roles and claims come from the directory.
        decision = await svc.evaluator.authorize(
            svc.directory,
            principal_id,
            policy_name,
            timeout=svc.settings.collaborator_timeout_seconds,
        )
        if isinstance(decision, Cancelled):
            raise HTTPException(
                status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Authorization timed out"
            )
        if isinstance(decision, Deny):
            raise HTTPException(
                status_code=HTTP_403_FORBIDDEN,
                detail={"policy": policy_name, "reasons": decision.reasons},
            )
        return principal_id

    return _dep


# --- Module Notes -----------------------------------------------------------
# Tokens carry no roles: a role granted or revoked takes effect on the next request.
