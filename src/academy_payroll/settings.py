"""
academy_payroll.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Refuse to boot in prod with the placeholder signing secret.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `ACADEMY_`).

    Defaults are safe for local dev; `prod` tightens error detail and secrets.
    """

    model_config = SettingsConfigDict(env_prefix="ACADEMY_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "academy-payroll"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "academy-payroll"
    jwt_audience: str = "academy-api"
    jwt_secret: str = Field(default=DEV_JWT_SECRET, repr=False)
    admin_token_ttl_minutes: int = Field(default=12 * 60, ge=1)
    student_token_ttl_minutes: int = Field(default=7 * 24 * 60, ge=1)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./academy.db"

    # Payroll ledger
    ledger_max_attempts: int = Field(default=5, ge=1)

    @model_validator(mode="after")
    def _require_real_secret_in_prod(self) -> Settings:
        if self.env == "prod" and self.jwt_secret == DEV_JWT_SECRET:
            raise ValueError("ACADEMY_JWT_SECRET must be set in prod")
        return self

    @property
    def cookie_secure(self) -> bool:
        return self.env == "prod"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every other module depends on this one; add fields rather than renaming them.
