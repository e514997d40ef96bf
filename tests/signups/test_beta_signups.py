from __future__ import annotations

from fastapi.testclient import TestClient

from signups.app import app


def test_create_beta_signup(client):
    response = client.post(
        "/api/beta-signups",
        json={"email": "Dev@Example.com", "experience": "beginner", "referrerOther": "a friend"},
    )
    assert response.status_code == 201
    payload = response.json()
    assert payload["id"]
    assert payload["createdAt"]
    assert payload["message"] == "Successfully signed up for beta access"


def test_duplicate_email_is_case_insensitive(client):
    assert client.post("/api/beta-signups", json={"email": "foo@bar.com"}).status_code == 201
    response = client.post("/api/beta-signups", json={"email": " Foo@Bar.COM "})
    assert response.status_code == 409
    assert response.json()["error"] == "This email is already registered for beta access"
    assert response.json()["fields"] == ["email"]
    assert client.get("/api/beta-signups").json()["count"] == 1


def test_missing_email_is_rejected(client):
    response = client.post("/api/beta-signups", json={"goal": "ship"})
    assert response.status_code == 400
    assert response.json() == {"error": "Email is required", "error_code": "VALIDATION_ERROR", "field": "email"}
    assert client.get("/api/beta-signups").json()["count"] == 0


def test_invalid_email_is_rejected(client):
    response = client.post("/api/beta-signups", json={"email": "nope"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid email format"


def test_wrongly_typed_body_is_rejected(client):
    response = client.post("/api/beta-signups", json={"email": ["a@b.co"]})
    assert response.status_code == 400
    assert response.json()["fields"] == ["email"]


def test_count_and_stats(client):
    assert client.get("/api/beta-signups").json() == {"count": 0, "message": "Total beta signups: 0"}
    signups = [
        {"email": "a@example.com", "referrer": "youtube", "experience": "pro", "goal": "ship"},
        {"email": "b@example.com", "referrer": "youtube", "experience": "pro"},
        {"email": "c@example.com", "referrer": "twitter", "experience": "pro"},
    ]
    for body in signups:
        assert client.post("/api/beta-signups", json=body).status_code == 201

    assert client.get("/api/beta-signups").json()["count"] == 3
    stats = client.get("/api/beta-signups/stats").json()
    assert stats["total"] == 3
    assert stats["byReferrer"] == [{"_id": "youtube", "count": 2}, {"_id": "twitter", "count": 1}]
    assert stats["byExperience"] == [{"_id": "pro", "count": 3}]
    assert stats["byGoal"] == [{"_id": None, "count": 2}, {"_id": "ship", "count": 1}]


def test_stats_on_empty_store(client):
    assert client.get("/api/beta-signups/stats").json() == {
        "total": 0,
        "byReferrer": [],
        "byExperience": [],
        "byGoal": [],
    }


def test_welcome_email_dispatched_after_signup(notifier):
    with TestClient(app) as test_client:
        assert test_client.post("/api/beta-signups", json={"email": "new@example.com"}).status_code == 201
    assert [message.to for message in notifier.sent] == ["new@example.com"]


def test_no_email_when_signup_fails(notifier):
    with TestClient(app) as test_client:
        test_client.post("/api/beta-signups", json={"email": "bad"})
    assert notifier.sent == []


def test_overlong_email_is_a_validation_error(client):
    response = client.post("/api/beta-signups", json={"email": "a" * 400 + "@example.com"})
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"
    assert response.json()["field"] == "email"
    assert client.get("/api/beta-signups").json()["count"] == 0
