from __future__ import annotations

import itertools

import pytest
from fastapi.testclient import TestClient

from signups.app import app
from signups.config import get_settings
from signups.services.notifications import get_notifier

_ip_counter = itertools.count(1)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent = []
        self.fail = False

    async def send(self, message) -> None:
        if self.fail:
            raise RuntimeError("email provider unreachable")
        self.sent.append(message)


@pytest.fixture(autouse=True)
def signup_env(monkeypatch, tmp_path):
    for key in (
        "ALLOWED_ORIGIN",
        "SENDGRID_API_KEY",
        "SENDGRID_FROM_EMAIL",
        "SMTP_SERVER",
        "RATE_LIMIT_BACKEND",
        "RATE_LIMIT_MAX_REQUESTS",
        "RATE_LIMIT_WINDOW_MS",
        "COMPETITION_CAMPAIGN",
        "SUBMISSION_CAMPAIGN",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'signups.db'}")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def notifier():
    fake = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture()
def client(notifier) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def fresh_ip():
    """Distinct forwarded-for header per call, so bulk inserts stay under the rate limit."""

    def _headers() -> dict[str, str]:
        return {"X-Forwarded-For": f"203.0.113.{next(_ip_counter) % 250 + 1}"}

    return _headers
