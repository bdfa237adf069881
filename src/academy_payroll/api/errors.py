"""
academy_payroll.api.errors

Exception-to-response mapping.

Responsibilities:
- Render `AcademyError` subclasses as `{success, message, ...}` JSON.
- Turn request validation failures into 400 `InvalidRequest` bodies.
- Catch everything else as a generic 500; raw detail only outside prod.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from academy_payroll.errors import AcademyError, Unauthenticated
from academy_payroll.observability.logging import get_logger
from academy_payroll.settings import Settings

log = get_logger(__name__)


def error_body(exc: AcademyError, *, expose_detail: bool) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": exc.message}
    body.update(exc.payload())
    if expose_detail and exc.error:
        body["error"] = exc.error
    return body


def register_error_handlers(app: FastAPI, settings: Settings) -> None:
    expose_detail = settings.env != "prod"

    @app.exception_handler(AcademyError)
    async def academy_error_handler(request: Request, exc: AcademyError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        if exc.status_code >= 500:
            log.error("request_failed", message=exc.message, error=exc.error)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc, expose_detail=expose_detail),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Input values are left out: request bodies may carry passwords.
        issues = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Invalid request", "error": issues},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.exception("unhandled_exception", path=request.url.path, method=request.method)
        body: dict[str, Any] = {"success": False, "message": "Internal server error"}
        if expose_detail:
            body["error"] = str(exc)
        return JSONResponse(status_code=500, content=body)


# --- Module Notes -----------------------------------------------------------
# Auth errors already carry generic messages (see `academy_payroll.errors`), so
# 401 bodies never say whether the token was missing, tampered with or stale.
