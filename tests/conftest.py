from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from sms_gateway.config import Settings, get_settings
from sms_gateway.main import app
from sms_gateway.rate_limit import limiter

API_KEY = "s3cret-key"

_ENV_VARS = (
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_PHONE_NUMBER",
    "TWILIO_TIMEOUT_SECONDS",
    "PORT",
    "FRONTEND_URL",
    "API_KEY",
    "APP_ENV",
    "NODE_ENV",
    "LOG_LEVEL",
)


class FakeMessage:
    def __init__(self, sid: str = "SM123", status: str = "queued") -> None:
        self.sid = sid
        self.status = status


class FakeMessages:
    """Records create() calls; raises `error` instead of returning if set."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error: Exception | None = None

    def create(self, **kwargs: Any) -> FakeMessage:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return FakeMessage()


class FakeTwilioClient:
    def __init__(self) -> None:
        self.messages = FakeMessages()


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "twilio_account_sid": "AC123",
        "twilio_auth_token": "token",
        "twilio_phone_number": "+15550000000",
        "api_key": None,
        "environment": "development",
        "frontend_url": "*",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate each test from the real environment and from earlier requests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    limiter.reset()
    yield
    app.dependency_overrides.clear()
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_twilio(monkeypatch: pytest.MonkeyPatch) -> FakeTwilioClient:
    fake = FakeTwilioClient()

    def get_fake_client(settings: Settings) -> FakeTwilioClient:
        return fake

    monkeypatch.setattr("sms_gateway.twilio_client.get_twilio_client", get_fake_client)
    return fake


@pytest.fixture
def client(settings: Settings) -> TestClient:
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


def use_settings(**overrides: Any) -> Settings:
    """Swap the settings the app sees for the rest of the test."""
    settings = make_settings(**overrides)
    app.dependency_overrides[get_settings] = lambda: settings
    return settings
