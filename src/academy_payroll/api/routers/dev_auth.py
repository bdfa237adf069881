"""
academy_payroll.api.routers.dev_auth

Token minting for local development (disabled in prod).
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from academy_payroll.api.deps import settings_dep
from academy_payroll.auth.jwt import JwtConfig, issue_token
from academy_payroll.auth.models import PrincipalRole
from academy_payroll.errors import NotFound
from academy_payroll.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=256)
    role: PrincipalRole
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise NotFound("Not found")

    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=body.subject,
        role=body.role.value,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(access_token=token)


# --- Module Notes -----------------------------------------------------------
# Minted tokens still go through the principal stores: the subject must exist.
