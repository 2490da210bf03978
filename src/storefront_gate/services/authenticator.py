"""Request authentication orchestration.

Every inbound request passes, in order, through:

1. the per-address rate limiter,
2. the `ts` session descriptor check (and the durable session log),
3. the `authorization` presence check,
4. public auth token decoding when the `login` header is exactly ``"true"``.

The first failing step decides the response. Protocol upgrade requests skip
all of it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from storefront_gate.core.errors import (
    ConfigurationError,
    MissingAuthorizationError,
    RateLimitedError,
)
from storefront_gate.core.security import decode_public_token
from storefront_gate.core.settings import settings
from storefront_gate.db.time import now_ms
from storefront_gate.schemas.session import AuthenticatedUser, SessionDescriptor
from storefront_gate.services.block_audit import BlockAuditService
from storefront_gate.services.rate_limiter import RateLimiter, build_rate_limiter
from storefront_gate.services.session_log import SessionLogService
from storefront_gate.services.session_validator import SessionTokenValidator

logger = logging.getLogger(__name__)

LOGIN_FLAG_VALUE = "true"


@dataclass(frozen=True)
class AuthContext:
    """Identity and session facts attached to an accepted request."""

    session: SessionDescriptor
    user: AuthenticatedUser | None = None
    public_token: str | None = None


def is_websocket_upgrade(headers: Mapping[str, str]) -> bool:
    """Return True for `Upgrade: websocket` requests (case-insensitive)."""
    upgrade = headers.get("upgrade")
    return bool(upgrade) and upgrade.lower() == "websocket"


class RequestAuthenticator:
    """Run the rate limit, session and token checks for one request."""

    def __init__(
        self,
        *,
        rate_limiter: RateLimiter,
        session_validator: SessionTokenValidator,
        session_log: SessionLogService,
        block_audit: BlockAuditService,
        token_secret: str | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.session_validator = session_validator
        self.session_log = session_log
        self.block_audit = block_audit
        self._token_secret = token_secret
        self.clock = clock

    @property
    def token_secret(self) -> str | None:
        """Shared secret for public auth tokens; falls back to the live settings."""
        if self._token_secret is not None:
            return self._token_secret
        return settings.user_token_secret

    async def authenticate(
        self,
        headers: Mapping[str, str],
        *,
        source_address: str,
        route: str,
    ) -> AuthContext:
        """Authenticate a request described by its headers.

        Args:
            headers: Request headers. Lookups use lower-case names, so pass a
                case-insensitive mapping or lower-cased keys.
            source_address: Client address used for rate limiting.
            route: Path and query string, recorded when a block is triggered.

        Returns:
            The context to attach to the request.

        Raises:
            AuthError: A subclass describing the first failed check; its
                `status_code` and `message` form the response.
        """
        current = self.clock()

        # Counter stores may block on network I/O
        decision = await asyncio.to_thread(
            self.rate_limiter.check_and_record, source_address, route, current
        )
        if decision.block is not None:
            self.block_audit.record(decision.block)
        if not decision.allowed:
            raise RateLimitedError(
                decision.message or "Too many requests.",
                decision.retry_after_seconds,
            )

        descriptor = self.session_validator.validate(headers.get("ts"), current)
        await asyncio.to_thread(self.session_log.insert, descriptor)

        authorization = headers.get("authorization")
        if not authorization:
            raise MissingAuthorizationError()

        if headers.get("login") != LOGIN_FLAG_VALUE:
            # Not a logged-in request: the header is an opaque public token and
            # is only required to be present.
            return AuthContext(session=descriptor, public_token=authorization)

        try:
            user_id = decode_public_token(authorization, self.token_secret)
        except ConfigurationError:
            logger.error("USER_TOKEN_SECRET is not configured; rejecting login request")
            raise
        return AuthContext(session=descriptor, user=AuthenticatedUser(id=user_id))


def build_authenticator(session_factory: sessionmaker[Session]) -> RequestAuthenticator:
    """Assemble an authenticator from application settings."""
    return RequestAuthenticator(
        rate_limiter=build_rate_limiter(),
        session_validator=SessionTokenValidator(),
        session_log=SessionLogService(session_factory),
        block_audit=BlockAuditService(session_factory),
    )
