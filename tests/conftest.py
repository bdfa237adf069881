"""
tests.conftest

Shared fixtures: a test-mode app on a throwaway SQLite file, an ASGI client,
and an owner account with a ready-made bearer header.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from factories import bearer, create_staff, mint
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from academy_payroll.api.app import create_app
from academy_payroll.auth.jwt import JwtConfig
from academy_payroll.db.models import StaffUser
from academy_payroll.settings import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'academy.db'}",
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not manage lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def sessionmaker(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return app.state.sessionmaker


@pytest.fixture
def jwt_cfg(settings: Settings) -> JwtConfig:
    return JwtConfig.from_settings(settings)


@pytest_asyncio.fixture
async def owner(sessionmaker: async_sessionmaker[AsyncSession]) -> StaffUser:
    return await create_staff(sessionmaker)


@pytest.fixture
def admin_headers(owner: StaffUser, jwt_cfg: JwtConfig) -> dict[str, str]:
    return bearer(mint(jwt_cfg, subject=str(owner.id), role="admin"))
