"""Validation of the per-tab session descriptor carried in the `ts` header."""

from __future__ import annotations

import base64
import json

from pydantic import ValidationError

from storefront_gate.core.errors import SessionTokenError, SessionTokenReason
from storefront_gate.core.settings import settings
from storefront_gate.schemas.session import SessionDescriptor


def _decode_b64(data: str) -> bytes:
    """Decode standard or URL-safe Base64, tolerating missing padding."""
    cleaned = "".join(data.split()).replace("-", "+").replace("_", "/").rstrip("=")
    padding = "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned + padding, validate=True)


class SessionTokenValidator:
    """Decode and freshness-check session descriptors."""

    def __init__(self, max_age_ms: int | None = None) -> None:
        self.max_age_ms = (
            max_age_ms if max_age_ms is not None else settings.session_token_max_age_ms
        )

    def validate(self, header_value: str | None, now_ms: int) -> SessionDescriptor:
        """Return the decoded descriptor or raise `SessionTokenError`.

        A descriptor is expired once it is strictly older than `max_age_ms`
        according to the server clock. Descriptors dated in the future are
        accepted.
        """
        if not header_value:
            raise SessionTokenError(SessionTokenReason.MISSING)

        try:
            payload = json.loads(_decode_b64(header_value).decode("utf-8"))
        except ValueError as err:  # bad Base64, bad UTF-8 or invalid JSON
            raise SessionTokenError(SessionTokenReason.MALFORMED) from err

        if not isinstance(payload, dict):
            raise SessionTokenError(SessionTokenReason.MALFORMED)

        try:
            descriptor = SessionDescriptor.model_validate(payload)
        except ValidationError as err:
            raise SessionTokenError(SessionTokenReason.INCOMPLETE) from err

        if now_ms - descriptor.generated_at > self.max_age_ms:
            raise SessionTokenError(SessionTokenReason.EXPIRED)

        return descriptor


def encode_session_descriptor(descriptor: SessionDescriptor) -> str:
    """Return the `ts` header value for a descriptor, as browser clients build it."""
    raw = descriptor.model_dump_json(by_alias=True, exclude_none=True)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")
