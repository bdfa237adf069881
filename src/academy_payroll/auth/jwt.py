"""
academy_payroll.auth.jwt

JWT issuing and validation helpers.

Responsibilities:
- Issue session tokens for staff and students (one `role` claim per token).
- Decode and validate JWTs with strict claim requirements (iss/aud/exp/iat/sub/role).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from academy_payroll.settings import Settings


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


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    role: str,
    ttl: timedelta,
    extra: Mapping[str, Any] | None = None,
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = dict(extra or {})
    # Registered claims win over anything passed in `extra`.
    payload.update(
        {
            "iss": cfg.issuer,
            "aud": cfg.audience,
            "sub": subject,
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
    )
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


def decode_and_validate(*, cfg: JwtConfig, token: str) -> dict[str, Any]:
    try:
        claims = jwt.decode(
            token,
            cfg.secret,
            algorithms=[cfg.alg],
            issuer=cfg.issuer,
            audience=cfg.audience,
            options={
                "require": ["exp", "iat", "iss", "aud", "sub"],
            },
        )
    except InvalidTokenError as e:
        raise JwtValidationError(str(e)) from e

    role = claims.get("role")
    if not isinstance(role, str) or not role:
        raise JwtValidationError("Token is missing the role claim")
    if not str(claims.get("sub", "")):
        raise JwtValidationError("Token is missing the subject claim")
    return claims


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by the login routers and `api/routers/dev_auth.py`.
