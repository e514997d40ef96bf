from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from signups.app import app, lifespan
from signups.config import get_settings
from signups.services.notifications import get_notifier


def _broken_notifier():
    raise RuntimeError("notifier wiring broke")


@pytest.fixture()
def broken_client():
    app.dependency_overrides[get_notifier] = _broken_notifier
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_notifier, None)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "OK"
    assert payload["environment"] == "test"
    assert payload["timestamp"]


def test_root_lists_endpoints(client):
    payload = client.get("/").json()
    assert payload["name"] == "BridgeMind Signups API"
    assert payload["version"] == "1.0.1"
    assert payload["endpoints"]["goalpostBeta"] == "/api/goalpost-beta"


def test_unknown_route_echoes_path_and_method(client):
    response = client.delete("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found", "path": "/api/nothing-here", "method": "DELETE"}


def test_malformed_json_is_a_validation_error(client):
    response = client.post(
        "/api/beta-signups", content="{not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_unexpected_error_includes_stack_outside_production(broken_client):
    response = broken_client.post("/api/beta-signups", json={"email": "a@b.co"})
    assert response.status_code == 500
    payload = response.json()
    assert payload["error"] == "Internal server error"
    assert "notifier wiring broke" in payload["stack"]


def test_unexpected_error_hides_stack_in_production(broken_client, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    get_settings.cache_clear()
    response = broken_client.post("/api/beta-signups", json={"email": "a@b.co"})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "error_code": "INTERNAL_ERROR"}


async def test_startup_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    get_settings.cache_clear()
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        async with lifespan(app):
            pass


def test_postgres_urls_use_async_driver(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://user:pw@db:5432/signups")
    get_settings.cache_clear()
    assert get_settings().database_url == "postgresql+asyncpg://user:pw@db:5432/signups"
