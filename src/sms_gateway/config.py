from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field


def _env(name: str) -> str | None:
    # Empty counts as unset, so `API_KEY=` in a .env file is not a secret.
    return os.getenv(name) or None


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # --- Twilio ---
    twilio_account_sid: str | None = Field(default_factory=lambda: _env("TWILIO_ACCOUNT_SID"))
    twilio_auth_token: str | None = Field(default_factory=lambda: _env("TWILIO_AUTH_TOKEN"))
    twilio_phone_number: str | None = Field(default_factory=lambda: _env("TWILIO_PHONE_NUMBER"))
    # Upper bound for the single outbound Twilio call; never retried.
    twilio_timeout_seconds: float = Field(
        default_factory=lambda: float(_env("TWILIO_TIMEOUT_SECONDS") or 10)
    )

    # --- HTTP ---
    port: int = Field(default_factory=lambda: int(_env("PORT") or 3000))
    frontend_url: str = Field(default_factory=lambda: _env("FRONTEND_URL") or "*")

    # Static bearer token for /send-sms and /test-sms.
    # Unset is only tolerated in development (see auth.require_api_key).
    api_key: str | None = Field(default_factory=lambda: _env("API_KEY"))

    # "development", or anything else for production-like behaviour.
    environment: str = Field(
        default_factory=lambda: _env("APP_ENV") or _env("NODE_ENV") or "development"
    )
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL") or "INFO")

    @property
    def twilio_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
