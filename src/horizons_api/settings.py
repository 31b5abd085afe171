"""
horizons_api.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (JWT signing secret).
- Reject fatal misconfiguration at construction time so startup aborts.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev-secret-change-me-horizons-0000"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HORIZONS_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "horizons-api"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "horizons-api"
    jwt_audience: str = "horizons-clients"
    jwt_secret: str = Field(default=DEV_JWT_SECRET, repr=False)
    token_ttl_hours: int = Field(default=24, ge=1)
    password_hash_iterations: int = Field(default=100_000, ge=1)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./horizons.db"

    # Slugs: probes per generation, and full rebuilds after a unique-index violation.
    slug_max_attempts: int = Field(default=100, ge=1)
    slug_save_retries: int = Field(default=3, ge=1)

    @model_validator(mode="after")
    def _check_signing_secret(self) -> Settings:
        if not self.jwt_secret.strip():
            raise ValueError("jwt_secret must not be empty")
        if self.env == "prod" and self.jwt_secret == DEV_JWT_SECRET:
            raise ValueError("jwt_secret must be overridden in prod (set HORIZONS_JWT_SECRET)")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# A validation error raised here surfaces before the app object exists, which is
# how a broken signing secret stops the process instead of failing per request.
