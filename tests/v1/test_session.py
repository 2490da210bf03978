# tests/v1/test_session.py
"""Tests for the session context endpoints."""

from fastapi.testclient import TestClient

from storefront_gate.core.security import encode_public_token
from tests.conftest import TEST_SECRET


def test_session_context_for_public_request(client: TestClient, public_headers, clock):
    r = client.get("/api/v1/session", headers=public_headers(sessionPoint="tab-9"))

    assert r.status_code == 200
    body = r.json()
    assert body["user_id"] is None
    assert body["public_token_presented"] is True
    assert body["session"]["sessionId"] == "session-1"
    assert body["session"]["sessionPoint"] == "tab-9"
    assert body["session"]["generatedAt"] == clock.now


def test_session_context_for_logged_in_request(client: TestClient, login_headers):
    token = encode_public_token("user-17", TEST_SECRET)

    r = client.get("/api/v1/session", headers=login_headers(token))

    assert r.status_code == 200
    assert r.json()["user_id"] == "user-17"
    assert r.json()["public_token_presented"] is False


def test_me_requires_login(client: TestClient, public_headers):
    r = client.get("/api/v1/me", headers=public_headers())

    assert r.status_code == 401
    assert r.json()["detail"] == "Login required"
