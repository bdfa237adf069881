"""
academy_payroll.api.__main__

Entrypoint for running the FastAPI application via `python -m academy_payroll.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with structlog-compatible logging config (no access log).
"""

from __future__ import annotations

import uvicorn

from academy_payroll.api.app import create_app
from academy_payroll.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        # `request_completed` events replace uvicorn access lines.
        access_log=False,
    )


if __name__ == "__main__":
    main()
