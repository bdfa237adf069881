"""
academy_payroll.api.app

FastAPI app factory for the academy payroll service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory, ledger locks).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from academy_payroll import __version__
from academy_payroll.api.errors import register_error_handlers
from academy_payroll.api.routers.dev_auth import router as dev_auth_router
from academy_payroll.api.routers.health import router as health_router
from academy_payroll.api.routers.payroll import router as payroll_router
from academy_payroll.api.routers.staff_auth import router as staff_auth_router
from academy_payroll.api.routers.student_portal import router as student_portal_router
from academy_payroll.db.init_db import init_db
from academy_payroll.db.session import create_engine, create_sessionmaker
from academy_payroll.observability.logging import configure_logging, get_logger
from academy_payroll.observability.middleware import RequestContextMiddleware
from academy_payroll.payroll.periods import utc_now
from academy_payroll.services.locks import KeyedLocks
from academy_payroll.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Engine, session factory and ledger locks are app-scoped; routers reach
        # them through `academy_payroll.api.deps`.
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.ledger_locks = KeyedLocks()
        if settings.env in ("dev", "test"):
            # Prod runs Alembic migrations instead.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Academy Payroll Ledger",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    # Wall clock for ledger period keys; replaceable in tests.
    app.state.clock = utc_now

    register_error_handlers(app, settings)
    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(staff_auth_router)
    app.include_router(student_portal_router)
    app.include_router(payroll_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; business logic stays in services/payroll.
