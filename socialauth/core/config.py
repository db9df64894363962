from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "SocialAuth"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    # Single attempt per request; None leaves the request without a timeout
    HTTP_TIMEOUT: float | None = None

    # Key material for sealing access grants (see socialauth.utils.grant_encryption)
    GRANT_SECRET: str = "change_me"

    # Keep the provider's raw XML/JSON payload on normalized entities
    SAVE_RAW_RESPONSE: bool = False

    # LinkedIn OAuth 2.0
    LINKEDIN_CLIENT_ID: str | None = None
    LINKEDIN_CLIENT_SECRET: str | None = None
    LINKEDIN_AUTHORIZATION_URL: str | None = None  # Overrides the provider default
    LINKEDIN_ACCESS_TOKEN_URL: str | None = None
    LINKEDIN_CUSTOM_PERMISSIONS: str | None = None  # e.g. "r_basicprofile,r_emailaddress"
    LINKEDIN_PLUGINS: Annotated[list[str], NoDecode] = []

    @field_validator("LINKEDIN_PLUGINS", mode="before")
    @classmethod
    def split_plugin_list(cls, v):
        """Accept a comma-separated identifier list from the environment."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        if self.ENV.lower() == "prod" and self.GRANT_SECRET == "change_me":
            raise ValueError("Insecure default secrets in production: GRANT_SECRET uses default placeholder")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    LOG_LEVEL: str = "DEBUG"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    GRANT_SECRET: str = "test-grant-secret"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"
    HTTP_TIMEOUT: float | None = 30.0


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
