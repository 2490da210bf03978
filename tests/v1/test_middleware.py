# tests/v1/test_middleware.py
"""End-to-end tests of the authentication middleware through the HTTP stack."""

from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from storefront_gate.core.security import encode_public_token
from storefront_gate.core.settings import settings
from storefront_gate.services.rate_limiter import RateLimiter, RedisCounterStore
from tests.conftest import TEST_SECRET, UnavailableRedis, make_ts_header


class TestBypass:
    def test_websocket_upgrade_skips_every_check(self, client: TestClient, rate_limiter):
        r = client.get("/", headers={"Upgrade": "WebSocket"})

        assert r.status_code == 200
        assert r.json()["name"] == settings.app_name
        assert rate_limiter.store.get_state("testclient") is None

    def test_exempt_paths_skip_every_check(self, client: TestClient, rate_limiter):
        assert client.get("/health").status_code == 200
        assert rate_limiter.store.get_state("testclient") is None


class TestSessionHeader:
    def test_missing_ts(self, client: TestClient):
        r = client.get("/", headers={"Authorization": "public-token"})
        assert r.status_code == 401
        assert r.json() == {"error": "Unauthorized Request: Missing session token (ts)"}

    def test_malformed_ts(self, client: TestClient):
        r = client.get("/", headers={"ts": "@@@", "Authorization": "public-token"})
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid session token format"}

    def test_incomplete_ts(self, client: TestClient, clock):
        r = client.get(
            "/",
            headers={"ts": make_ts_header(clock.now, sessionPoint=None), "Authorization": "x"},
        )
        assert r.status_code == 400
        assert r.json() == {"error": "Invalid session token: Missing required session details"}

    def test_expired_ts(self, client: TestClient, clock):
        r = client.get(
            "/",
            headers={"ts": make_ts_header(clock.now - 30_001), "Authorization": "x"},
        )
        assert r.status_code == 403
        assert r.json() == {"error": "Session token expired"}

    def test_reused_session_point(self, client: TestClient, clock):
        headers = {"ts": make_ts_header(clock.now, sessionPoint="tab-1"), "Authorization": "x"}
        assert client.get("/", headers=headers).status_code == 200

        r = client.get("/", headers=headers)

        assert r.status_code == 500
        assert r.json() == {"error": "Internal server error: Unable to store session info."}


class TestAuthorization:
    def test_missing_authorization(self, client: TestClient, clock):
        r = client.get("/", headers={"ts": make_ts_header(clock.now)})
        assert r.status_code == 401
        assert r.json() == {"error": "Missing authentication token"}

    def test_public_token_is_not_inspected(self, client: TestClient, public_headers):
        r = client.get("/", headers=public_headers())
        assert r.status_code == 200

    def test_login_with_valid_token(self, client: TestClient, login_headers):
        token = encode_public_token("42", TEST_SECRET)
        r = client.get("/api/v1/me", headers=login_headers(token))
        assert r.status_code == 200
        assert r.json() == {"id": "42"}

    def test_login_with_wrong_secret_is_forbidden(self, client: TestClient, login_headers):
        token = encode_public_token("42", "a-different-secret")
        r = client.get("/", headers=login_headers(token))
        assert r.status_code == 403
        assert r.json() == {"error": "Invalid token structure"}

    def test_login_with_short_token(self, client: TestClient, login_headers):
        r = client.get("/", headers=login_headers("0" * 36))
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid token length"}

    def test_login_with_bad_encoding(self, client: TestClient, login_headers):
        r = client.get("/", headers=login_headers("0" * 20 + "***" + "0" * 16))
        assert r.status_code == 401
        assert r.json() == {"error": "Invalid token encoding"}

    def test_login_without_configured_secret(self, client: TestClient, login_headers, authenticator):
        authenticator._token_secret = None
        token = encode_public_token("42", TEST_SECRET)

        with patch.object(settings, "user_token_secret", None):
            r = client.get("/", headers=login_headers(token))

        assert r.status_code == 500
        assert r.json() == {"error": "Server configuration error: Secret missing"}


class TestRateLimiting:
    def test_fifty_first_request_is_throttled(
        self, client: TestClient, public_headers, recording_audit
    ):
        for _ in range(50):
            assert client.get("/", headers=public_headers()).status_code == 200

        r = client.get("/?page=3", headers=public_headers())

        assert r.status_code == 429
        assert r.json() == {"error": "Too many requests. Blocked for 300 seconds."}
        assert r.headers["Retry-After"] == "300"
        [event] = recording_audit.events
        assert event.address == "testclient"
        assert event.route == "/?page=3"

    def test_blocked_client_gets_remaining_wait(
        self, client: TestClient, public_headers, recording_audit, clock
    ):
        for _ in range(51):
            client.get("/", headers=public_headers())
        clock.advance(1_500)

        r = client.get("/", headers=public_headers())

        assert r.status_code == 429
        assert r.json() == {"error": "Too many requests. Please try again in 299 seconds."}

    def test_forwarded_for_is_the_rate_limit_key(
        self, client: TestClient, public_headers, rate_limiter
    ):
        headers = public_headers()
        headers["X-Forwarded-For"] = "203.0.113.9, 10.0.0.1"

        client.get("/", headers=headers)

        assert rate_limiter.store.get_state("203.0.113.9").count == 1
        assert rate_limiter.store.get_state("testclient") is None

    def test_throttled_before_session_check(self, client: TestClient, public_headers, recording_audit):
        for _ in range(50):
            client.get("/", headers=public_headers())

        r = client.get("/")

        assert r.status_code == 429


class TestCounterStoreOutage:
    def test_requests_still_served_when_redis_is_down(
        self, client: TestClient, public_headers, authenticator
    ):
        authenticator.rate_limiter = RateLimiter(
            RedisCounterStore(UnavailableRedis()),
            request_limit=50,
            window_ms=15_000,
            base_block_ms=300_000,
        )

        r = client.get("/", headers=public_headers())

        assert r.status_code == 200

    def test_throttling_continues_on_local_counts(
        self, client: TestClient, public_headers, authenticator, recording_audit
    ):
        authenticator.rate_limiter = RateLimiter(
            RedisCounterStore(UnavailableRedis()),
            request_limit=2,
            window_ms=15_000,
            base_block_ms=300_000,
        )
        for _ in range(2):
            assert client.get("/", headers=public_headers()).status_code == 200

        r = client.get("/", headers=public_headers())

        assert r.status_code == 429
        assert r.json() == {"error": "Too many requests. Blocked for 300 seconds."}
