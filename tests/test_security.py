"""Tests for JWT verification and field encryption."""

from datetime import timedelta

import jwt
import pytest
from cryptography.fernet import Fernet
from fastapi import HTTPException

from novapay.core import security


class TestTokens:

    def test_valid_token(self, make_token):
        token = make_token("user-1", "ada@example.com")

        payload = security.verify_token(token)

        assert payload["sub"] == "user-1"
        assert payload["email"] == "ada@example.com"
        assert payload["type"] == "access"

    def test_expired_token(self, make_token):
        token = make_token("user-1", "ada@example.com", expires_in=timedelta(hours=-1))

        with pytest.raises(HTTPException) as exc_info:
            security.verify_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_token_type(self, test_rsa_keys):
        token = jwt.encode(
            {"sub": "user-1", "type": "refresh"},
            test_rsa_keys["private_key"],
            algorithm="RS256",
        )

        with pytest.raises(HTTPException) as exc_info:
            security.verify_token(token, expected_type="access")

        assert exc_info.value.detail == "Expected access token"

    def test_token_signed_with_other_key(self):
        token = jwt.encode({"sub": "user-1", "type": "access"}, "not-the-key", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            security.verify_token(token)

        assert exc_info.value.detail == "Invalid token"


class TestEncryption:

    def test_encrypt_decrypt(self):
        token = security.encrypt_value("0123456789")

        assert token != "0123456789"
        assert security.decrypt_value(token) == "0123456789"

    def test_wrong_key_raises_value_error(self):
        token = security.encrypt_value("0123456789")
        security.configure_fernet(Fernet.generate_key())

        with pytest.raises(ValueError):
            security.decrypt_value(token)
