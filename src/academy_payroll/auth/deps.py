"""
academy_payroll.auth.deps

FastAPI dependencies for authentication and authorization.

Responsibilities:
- Extract a credential from a named cookie or the bearer header.
- Verify it, check its role against the gate, and resolve the principal.
- Attach the principal to `request.state` for downstream handlers.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from academy_payroll.api.deps import db_session, settings_dep
from academy_payroll.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from academy_payroll.auth.models import Principal, PrincipalRole
from academy_payroll.auth.stores import (
    PrincipalStore,
    StaffPrincipalStore,
    StudentPrincipalStore,
)
from academy_payroll.errors import Forbidden, InvalidCredential, Unauthenticated
from academy_payroll.observability.logging import get_logger
from academy_payroll.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)

ADMIN_COOKIES = ("token", "authToken")
STUDENT_COOKIES = ("studentToken",)


class AuthGate:
    """
    Authenticate-as-role. One instance per principal class; the role, the
    cookies it reads and the store it resolves against are configuration.
    """

    def __init__(
        self,
        *,
        role: PrincipalRole,
        cookie_names: tuple[str, ...],
        store: PrincipalStore,
    ) -> None:
        self.role = role
        self.cookie_names = cookie_names
        self.store = store

    def extract_token(
        self, request: Request, creds: HTTPAuthorizationCredentials | None
    ) -> str | None:
        # Cookies first, in configured order; bearer header is the fallback.
        for name in self.cookie_names:
            token = request.cookies.get(name)
            if token:
                return token
        if creds is not None and creds.credentials:
            return creds.credentials
        return None

    async def __call__(
        self,
        request: Request,
        creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
        session: AsyncSession = Depends(db_session),
        settings: Settings = Depends(settings_dep),
    ) -> Principal:
        token = self.extract_token(request, creds)
        if token is None:
            self._reject("missing_token")
            raise Unauthenticated("missing_token")

        try:
            claims = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=token)
        except JwtValidationError as e:
            self._reject("invalid_token", detail=str(e))
            raise InvalidCredential("invalid_token") from e

        # A valid token for the wrong principal class is refused, never downgraded.
        if claims["role"] != self.role.value:
            self._reject("role_mismatch", token_role=claims["role"])
            raise Forbidden("role_mismatch")

        principal = await self.store.load(session, str(claims["sub"]))
        if principal is None:
            self._reject("principal_not_found", subject=str(claims["sub"]))
            raise Unauthenticated("principal_not_found")

        request.state.principal = principal
        structlog.contextvars.bind_contextvars(principal_id=principal.subject)
        return principal

    def _reject(self, reason: str, **fields: str) -> None:
        log.warning("auth_rejected", reason=reason, expected_role=self.role.value, **fields)


require_admin = AuthGate(
    role=PrincipalRole.admin,
    cookie_names=ADMIN_COOKIES,
    store=StaffPrincipalStore(),
)

require_student = AuthGate(
    role=PrincipalRole.student,
    cookie_names=STUDENT_COOKIES,
    store=StudentPrincipalStore(),
)


# --- Module Notes -----------------------------------------------------------
# Routers declare `Depends(require_admin)` / `Depends(require_student)`; FastAPI
# caches the dependency per request, so a route may both gate on and receive it.
