"""
mutamba_erp.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the backend and the client core.
- Hide secrets from repr/logging (API key, JWT secret, seed password).
- Detect an unconfigured backend so callers can route to a configuration-error state.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mutamba_erp.auth.models import normalize_email
from mutamba_erp.errors import ConfigurationMissing


class Settings(BaseSettings):
    """
    One settings object shared by the API process and by client processes.
    The backend section mirrors the named values a hosted backend project hands out.
    """

    model_config = SettingsConfigDict(env_prefix="MUTAMBA_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "mutamba-erp"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Backend project. `api_key` is the value whose absence means "not configured".
    api_key: str = Field(default="", repr=False)
    auth_domain: str = ""
    project_id: str = ""
    storage_bucket: str = ""
    messaging_sender_id: str = ""
    app_id: str = ""
    functions_region: str = "southamerica-east1"

    # Bootstrap escape hatch: this address always resolves to admin.
    super_admin_email: str = "yuri@teste.com"
    super_admin_password: str = Field(default="", repr=False)

    # Session tokens issued by the identity provider
    jwt_alg: str = "HS256"
    jwt_issuer: str = "mutamba-erp"
    jwt_audience: str = "mutamba-erp-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    session_ttl_minutes: int = 60

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./mutamba.db"

    # Client side: where the backend lives
    backend_base_url: str = "http://localhost:8080"
    backend_timeout_seconds: float = 10.0

    @field_validator("super_admin_email")
    @classmethod
    def normalize_super_admin_email(cls, v: str) -> str:
        # Compared exactly against identity emails, which are stored lower-cased.
        return normalize_email(v)

    @property
    def backend_configured(self) -> bool:
        return bool(self.api_key)

    def require_backend(self) -> None:
        if not self.backend_configured:
            raise ConfigurationMissing("MUTAMBA_API_KEY")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Both halves of the system read this module: the API process for its database and
# token config, client processes for the backend URL and API key.
