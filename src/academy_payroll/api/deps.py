"""
academy_payroll.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions, ledger locks and clock.
- Encapsulate app.state access patterns (engine/sessionmaker/locks).
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import datetime

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from academy_payroll.services.locks import KeyedLocks
from academy_payroll.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The settings object the app was built with (tests build apps with their own).
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # The sessionmaker is created on app startup in `academy_payroll.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def ledger_locks(request: Request) -> KeyedLocks:
    return request.app.state.ledger_locks  # type: ignore[attr-defined]


def ledger_clock(request: Request) -> Callable[[], datetime]:
    return request.app.state.clock  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


# --- Module Notes -----------------------------------------------------------
# Nothing here reads module-level state: every shared resource hangs off app.state.
