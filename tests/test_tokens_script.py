# tests/test_tokens_script.py
"""Tests for the token command line helpers."""

import base64
import json
from unittest.mock import patch

from storefront_gate.core.security import decode_public_token
from storefront_gate.core.settings import settings
from storefront_gate.scripts.tokens import SECRET_ALPHABET, generate_secret, main


def test_mint_then_decode(capsys):
    with patch.object(settings, "user_token_secret", "abcdefgh"):
        assert main(["mint", "42"]) == 0
        token = capsys.readouterr().out.strip()
        assert decode_public_token(token, "abcdefgh") == "42"

        assert main(["decode", token]) == 0
        assert capsys.readouterr().out.strip() == "42"


def test_decode_failure_exits_non_zero(capsys):
    with patch.object(settings, "user_token_secret", "abcdefgh"):
        assert main(["decode", "short"]) == 1
    assert "Invalid token length" in capsys.readouterr().err


def test_mint_without_secret(capsys):
    with patch.object(settings, "user_token_secret", None):
        assert main(["mint", "42"]) == 1
    assert "Secret missing" in capsys.readouterr().err


def test_generate_secret_uses_alphabet():
    secret = generate_secret(64)
    assert len(secret) == 64
    assert set(secret) <= set(SECRET_ALPHABET)


def test_session_header_is_decodable(capsys):
    assert main(["session", "--session-id", "cli"]) == 0
    payload = json.loads(base64.b64decode(capsys.readouterr().out.strip()))
    assert payload["sessionId"] == "cli"
    assert payload["sessionPoint"]
    assert payload["generatedAt"] > 0
