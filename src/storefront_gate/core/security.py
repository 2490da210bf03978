"""Public auth token encoding.

A public auth token binds a user id to the shared secret:

    prefix (20 hex) || base64(secret[:n] + user_id + secret[n:]) || suffix (16 hex)

with ``n = len(secret) // 2``. The random padding only hides the Base64 body
from naive pattern matching; anyone holding the secret can mint tokens. The
layout is kept byte-compatible with existing clients.
"""
from __future__ import annotations

import base64
import secrets

from storefront_gate.core.errors import (
    ConfigurationError,
    PublicTokenError,
    PublicTokenReason,
)

PREFIX_BYTES = 10
SUFFIX_BYTES = 8
PREFIX_LENGTH = PREFIX_BYTES * 2
SUFFIX_LENGTH = SUFFIX_BYTES * 2


def split_secret(secret: str | None) -> tuple[str, str]:
    """Split the shared secret at its midpoint.

    Raises:
        ConfigurationError: If the secret is unset or empty.
    """
    if not secret:
        raise ConfigurationError()
    split_index = len(secret) // 2
    return secret[:split_index], secret[split_index:]


def encode_public_token(user_id: str, secret: str | None) -> str:
    """Return a freshly padded public auth token for `user_id`."""
    first, second = split_secret(secret)
    merged = f"{first}{user_id}{second}"
    encoded = base64.b64encode(merged.encode("utf-8")).decode("ascii")
    prefix = secrets.token_hex(PREFIX_BYTES)
    suffix = secrets.token_hex(SUFFIX_BYTES)
    return f"{prefix}{encoded}{suffix}"


def decode_public_token(token: str, secret: str | None) -> str:
    """Recover the user id embedded in a public auth token.

    Args:
        token: Value of the `authorization` header.
        secret: Shared secret the token was minted with.

    Returns:
        The embedded user id.

    Raises:
        ConfigurationError: If the secret is unset or empty.
        PublicTokenError: If the token is too short, not Base64, or was not
            built around this secret.
    """
    first, second = split_secret(secret)

    if len(token) <= PREFIX_LENGTH + SUFFIX_LENGTH:
        raise PublicTokenError(PublicTokenReason.TOO_SHORT)

    encoded = token[PREFIX_LENGTH : len(token) - SUFFIX_LENGTH]
    try:
        merged = base64.b64decode(encoded, validate=True).decode("utf-8")
    except ValueError as err:  # binascii.Error, non-ASCII input, bad UTF-8
        raise PublicTokenError(PublicTokenReason.BAD_ENCODING) from err

    if (
        len(merged) < len(first) + len(second)
        or not merged.startswith(first)
        or not merged.endswith(second)
    ):
        raise PublicTokenError(PublicTokenReason.BAD_STRUCTURE)

    return merged[len(first) : len(merged) - len(second)]
