# tests/conftest.py
from __future__ import annotations

import base64
import json
import os
import uuid
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
import redis

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("USER_TOKEN_SECRET", "abcdefgh")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront_gate.db.session import Base
from storefront_gate.db.session import get_db as app_get_session
from storefront_gate.main import app as fastapi_app
from storefront_gate.services.authenticator import RequestAuthenticator
from storefront_gate.services.block_audit import BlockAuditService
from storefront_gate.services.rate_limiter import BlockedAddress, InMemoryCounterStore, RateLimiter
from storefront_gate.services.session_log import SessionLogService
from storefront_gate.services.session_validator import SessionTokenValidator

TEST_DB_URL = "sqlite://"
TEST_SECRET = "abcdefgh"
START_MS = 1_700_000_000_000


class FakeClock:
    """Deterministic millisecond clock."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingBlockAudit:
    """Stand-in for the block audit service that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[BlockedAddress] = []

    def record(self, event: BlockedAddress) -> None:
        self.events.append(event)

    async def drain(self) -> None:
        return None


class UnavailableRedis:
    """Redis double whose every call fails as if the server were down."""

    def _fail(self, *args: Any, **kwargs: Any) -> Any:
        raise redis.ConnectionError("Error 111 connecting to 127.0.0.1:1. Connection refused.")

    hgetall = hset = hincrby = _fail


def make_ts_header(generated_at: int, **overrides: Any) -> str:
    """Build a Base64 `ts` header value with a fresh session point."""
    payload: dict[str, Any] = {
        "sessionId": "session-1",
        "sessionPoint": uuid.uuid4().hex,
        "generatedAt": generated_at,
        "userAgent": "pytest",
        "language": "en-US",
        "platform": "Linux x86_64",
        "screenResolution": "1920x1080",
        "timezoneOffset": -60,
    }
    payload.update(overrides)
    payload = {key: value for key, value in payload.items() if value is not None}
    return base64.b64encode(json.dumps(payload).encode()).decode()


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def rate_limiter() -> RateLimiter:
    return RateLimiter(
        InMemoryCounterStore(),
        request_limit=50,
        window_ms=15_000,
        base_block_ms=300_000,
    )


@pytest.fixture()
def authenticator(
    session_factory: sessionmaker[Session],
    rate_limiter: RateLimiter,
    clock: FakeClock,
) -> RequestAuthenticator:
    return RequestAuthenticator(
        rate_limiter=rate_limiter,
        session_validator=SessionTokenValidator(max_age_ms=30_000),
        session_log=SessionLogService(session_factory),
        block_audit=BlockAuditService(session_factory),
        token_secret=TEST_SECRET,
        clock=clock,
    )


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_app_state(
    app: FastAPI,
    session_factory: sessionmaker[Session],
    authenticator: RequestAuthenticator,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    original_authenticator = app.state.authenticator
    app.state.authenticator = authenticator
    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.state.authenticator = original_authenticator


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def recording_audit(authenticator: RequestAuthenticator) -> RecordingBlockAudit:
    """Replace the block audit writer with an in-memory recorder."""
    recorder = RecordingBlockAudit()
    authenticator.block_audit = recorder  # type: ignore[assignment]
    return recorder


@pytest.fixture()
def public_headers(clock: FakeClock) -> Callable[..., dict[str, str]]:
    """Return a factory for headers of an anonymous (not logged-in) request."""

    def _build(**overrides: Any) -> dict[str, str]:
        return {
            "ts": make_ts_header(clock.now, **overrides),
            "Authorization": "public-token",
        }

    return _build


@pytest.fixture()
def login_headers(clock: FakeClock) -> Callable[..., dict[str, str]]:
    """Return a factory for headers of a logged-in request carrying `token`."""

    def _build(token: str) -> dict[str, str]:
        return {
            "ts": make_ts_header(clock.now),
            "Authorization": token,
            "login": "true",
        }

    return _build
