"""
academy_payroll.api.routers.staff_auth

Staff (administrative) session endpoints.

Responsibilities:
- Exchange username/password for a signed admin token (+ httpOnly cookie).
- Clear the session cookie.
- Return the caller's public profile.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Response
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from academy_payroll.api.deps import db_session, settings_dep
from academy_payroll.api.schemas import CamelModel
from academy_payroll.auth.deps import ADMIN_COOKIES, require_admin
from academy_payroll.auth.jwt import JwtConfig, issue_token
from academy_payroll.auth.models import Principal, PrincipalRole
from academy_payroll.auth.passwords import verify_password
from academy_payroll.auth.stores import staff_principal
from academy_payroll.db.models import StaffUser
from academy_payroll.db.repositories.principals import StaffUserRepo
from academy_payroll.errors import LoginFailed
from academy_payroll.observability.logging import get_logger
from academy_payroll.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

SESSION_COOKIE = ADMIN_COOKIES[0]


class LoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=128)
    # bcrypt only looks at the first 72 bytes.
    password: str = Field(min_length=1, max_length=72)


class StaffProfile(CamelModel):
    id: uuid.UUID
    username: str
    full_name: str
    role: str
    permissions: list[str]
    is_active: bool
    last_login: datetime | None


class LoginResponse(CamelModel):
    success: bool = True
    message: str
    user: StaffProfile
    token: str


class ProfileResponse(CamelModel):
    success: bool = True
    user: StaffProfile


def _profile(user: StaffUser) -> StaffProfile:
    principal = staff_principal(user)
    return StaffProfile(
        id=user.id,
        username=user.username,
        full_name=user.full_name,
        role=user.role.value,
        permissions=sorted(principal.permissions),
        is_active=user.is_active,
        last_login=user.last_login,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> LoginResponse:
    users = StaffUserRepo(session)
    user = await users.get_for_login(body.username)
    if user is None or not await verify_password(body.password, user.password_hash):
        log.info("login_failed", principal_role="admin", reason="bad_credentials")
        raise LoginFailed("bad_credentials")
    if not user.is_active:
        log.info("login_failed", principal_role="admin", reason="inactive", user_id=str(user.id))
        raise LoginFailed("inactive")

    await users.record_login(user)
    await session.commit()

    ttl = timedelta(minutes=settings.admin_token_ttl_minutes)
    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=str(user.id),
        role=PrincipalRole.admin.value,
        ttl=ttl,
        extra={"staffRole": user.role.value},
    )
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    log.info("login_succeeded", principal_role="admin", user_id=str(user.id))
    return LoginResponse(message=f"Welcome, {user.full_name}!", user=_profile(user), token=token)


@router.post("/logout")
async def logout(
    response: Response,
    principal: Principal = Depends(require_admin),
) -> dict[str, object]:
    for name in ADMIN_COOKIES:
        response.delete_cookie(name)
    log.info("logout", principal_role="admin", user_id=principal.subject)
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=ProfileResponse)
async def me(
    principal: Principal = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> ProfileResponse:
    user = await StaffUserRepo(session).get_public(uuid.UUID(principal.subject))
    if user is None:
        # Deleted between the gate's lookup and this one.
        raise LoginFailed("principal_vanished")
    return ProfileResponse(user=_profile(user))
