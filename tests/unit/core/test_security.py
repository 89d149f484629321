"""
Unit Tests for Security Utilities
Tests for docvault/core/security.py
"""

from datetime import timedelta

import pytest
from jose import jwt

from docvault.core.config import settings
from docvault.core.exceptions import AuthenticationException
from docvault.core.security import (
    ALGORITHM,
    create_access_token,
    decode_token,
    get_password_hash,
    verify_access_token,
    verify_password,
)


@pytest.mark.unit
class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = get_password_hash("s3cret-password")
        assert hashed != "s3cret-password"
        assert verify_password("s3cret-password", hashed) is True

    def test_wrong_password(self):
        hashed = get_password_hash("s3cret-password")
        assert verify_password("other-password", hashed) is False


@pytest.mark.unit
class TestAccessTokens:

    def test_round_trip(self):
        token = create_access_token({"sub": "user-1"})
        payload = verify_access_token(token)
        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"
        assert "exp" in payload

    def test_expired_token(self):
        token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-5))
        with pytest.raises(AuthenticationException) as exc_info:
            decode_token(token)
        assert "expired" in exc_info.value.message

    def test_tampered_token(self):
        token = create_access_token({"sub": "user-1"})
        with pytest.raises(AuthenticationException):
            decode_token(token + "x")

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "user-1", "type": "access"}, "another-secret" * 4, algorithm=ALGORITHM)
        with pytest.raises(AuthenticationException):
            verify_access_token(token)

    def test_wrong_token_type(self):
        token = jwt.encode({"sub": "user-1", "type": "refresh"}, settings.SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(AuthenticationException) as exc_info:
            verify_access_token(token)
        assert exc_info.value.message == "Invalid token type"

    def test_missing_subject(self):
        token = jwt.encode({"type": "access"}, settings.SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(AuthenticationException):
            verify_access_token(token)
