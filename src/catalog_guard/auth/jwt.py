"""
catalog_guard.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue short-lived tokens naming a principal id (dev convenience, tests).
- Decode and validate tokens with strict claim requirements (iss/aud/exp/iat/sub).

Tokens carry identity only: roles and claims are always read from the directory, so a
membership edit takes effect on the next request.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from catalog_guard.settings import Settings


@dataclass(frozen=True, slots=True)
class JwtConfig:
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


class JwtValidationError(Exception):
    pass


def issue_token(*, cfg: JwtConfig, subject: str, ttl: timedelta = timedelta(hours=1)) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_subject(*, cfg: JwtConfig, token: str) -> str:
    try:
        payload = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={"require": ["exp", "iat", "iss", "aud", "sub"]},
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e
    subject = str(payload.get("sub", ""))
    if not subject:
        raise JwtValidationError("empty subject")
    return subject
