# src/storefront_gate/scripts/tokens.py
"""
Token utilities for operators and client developers.

Subcommands:
1. mint <user_id>         print a public auth token for the configured secret
2. decode <token>         print the user id embedded in a public auth token
3. generate-secret [-n]   print a new random value for USER_TOKEN_SECRET
4. session                print a fresh `ts` header value for manual testing
"""

from __future__ import annotations

import argparse
import secrets
import sys
import uuid

from storefront_gate.core.errors import AuthError
from storefront_gate.core.security import decode_public_token, encode_public_token
from storefront_gate.core.settings import settings
from storefront_gate.db.time import now_ms
from storefront_gate.schemas.session import SessionDescriptor
from storefront_gate.services.session_validator import encode_session_descriptor

SECRET_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789._=/"
DEFAULT_SECRET_LENGTH = 256


def generate_secret(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """Return a random shared secret drawn from `SECRET_ALPHABET`."""
    return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))


def build_session_header(session_id: str | None = None) -> str:
    """Return a `ts` header value generated now, with a new session point."""
    descriptor = SessionDescriptor(
        sessionId=session_id or uuid.uuid4().hex,
        sessionPoint=uuid.uuid4().hex,
        generatedAt=now_ms(),
        userAgent="storefront-gate-cli",
        platform=sys.platform,
    )
    return encode_session_descriptor(descriptor)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Public auth token and session header helpers")
    subparsers = parser.add_subparsers(dest="command", required=True)

    mint = subparsers.add_parser("mint", help="Mint a public auth token for a user id")
    mint.add_argument("user_id")

    decode = subparsers.add_parser("decode", help="Recover the user id from a token")
    decode.add_argument("token")

    generate = subparsers.add_parser("generate-secret", help="Generate a shared secret")
    generate.add_argument("-n", "--length", type=int, default=DEFAULT_SECRET_LENGTH)

    session = subparsers.add_parser("session", help="Build a fresh ts header value")
    session.add_argument("--session-id", default=None)

    args = parser.parse_args(argv)

    try:
        if args.command == "mint":
            print(encode_public_token(args.user_id, settings.user_token_secret))
        elif args.command == "decode":
            print(decode_public_token(args.token, settings.user_token_secret))
        elif args.command == "generate-secret":
            print(generate_secret(args.length))
        else:
            print(build_session_header(args.session_id))
    except AuthError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
