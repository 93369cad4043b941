"""Tests for access token creation and verification."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from kingdom.auth.jwt import create_access_token, verify_token
from kingdom.config import get_settings


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token(user_id=1, username="admin", is_admin=True)
        payload = verify_token(token)
        assert payload["sub"] == "1"
        assert payload["username"] == "admin"
        assert payload["is_admin"] is True
        assert payload["type"] == "access"

    def test_non_admin_claim(self):
        payload = verify_token(create_access_token(user_id=2, username="warden"))
        assert payload["is_admin"] is False

    def test_wrong_type_rejected(self):
        token = create_access_token(user_id=1, username="admin")
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(token, expected_type="refresh")

    def test_foreign_secret_rejected(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": "1", "iss": settings.jwt_issuer, "type": "access"},
            "some-other-secret-that-is-long-enough-for-hs256",
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)

    def test_expired_token_rejected(self):
        settings = get_settings()
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {
                "sub": "1",
                "iat": past,
                "exp": past + timedelta(minutes=5),
                "iss": settings.jwt_issuer,
                "type": "access",
            },
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(token)

    def test_foreign_issuer_rejected(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": "1", "iss": "someone-else", "type": "access"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)
