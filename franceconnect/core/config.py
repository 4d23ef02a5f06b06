from __future__ import annotations

import os
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "FranceConnect"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    FRANCECONNECT_LOG_LEVEL: str | None = None  # defaults to LOG_LEVEL

    # Session storage (server-side; the cookie only carries an opaque id)
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_TTL_SECONDS: int = 3600
    SESSION_COOKIE_NAME: str = "fc_session"
    SESSION_COOKIE_SECURE: bool = True

    # Outbound calls to the identity provider
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # FranceConnect OIDC client
    FRANCECONNECT_CLIENT_ID: str | None = None
    FRANCECONNECT_CLIENT_SECRET: str | None = None
    FRANCECONNECT_REDIRECT_URI: str | None = None
    FRANCECONNECT_LOGOUT_REDIRECT: str | None = None
    FRANCECONNECT_SCOPES: str = "openid profile email"  # space or comma separated
    FRANCECONNECT_SCOPE_SEPARATOR: str = " "

    @field_validator("FRANCECONNECT_SCOPE_SEPARATOR", mode="before")
    @classmethod
    def default_empty_separator(cls, v):
        """An empty separator from the environment falls back to a single space."""
        if v is None or v == "":
            return " "
        return v

    @property
    def franceconnect_scopes(self) -> list[str]:
        return [scope for scope in self.FRANCECONNECT_SCOPES.replace(",", " ").split() if scope]

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        required_in_prod = (
            "FRANCECONNECT_CLIENT_ID",
            "FRANCECONNECT_CLIENT_SECRET",
            "FRANCECONNECT_REDIRECT_URI",
        )
        if self.ENV.lower() in ("prod", "production"):
            missing = [name for name in required_in_prod if not getattr(self, name)]
            if missing:
                raise ValueError(f"Missing required production settings: {', '.join(missing)}")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    SESSION_COOKIE_SECURE: bool = False
    FRANCECONNECT_REDIRECT_URI: str | None = "http://localhost:8000/auth/oauth/franceconnect/callback"
    FRANCECONNECT_LOGOUT_REDIRECT: str | None = "http://localhost:8000/"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    SESSION_COOKIE_SECURE: bool = False


class ProdSettings(BaseAppSettings):
    ENV: str = "production"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
