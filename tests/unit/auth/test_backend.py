"""Unit tests for JWT handling."""

from datetime import timedelta
from uuid import uuid4

from jose import jwt

from payaudit.config import settings
from payaudit.core.auth.backend import create_access_token, decode_token


class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_create_access_token_returns_jwt(self):
        token = create_access_token(uuid4())

        assert isinstance(token, str)
        # JWT has three parts separated by dots
        assert token.count(".") == 2

    def test_decode_token_valid(self):
        """decode_token should recover the user ID."""
        user_id = uuid4()

        data = decode_token(create_access_token(user_id))

        assert data is not None
        assert data.user_id == user_id
        assert data.type == "access"

    def test_additional_claims_are_encoded(self):
        token = create_access_token(uuid4(), additional_claims={"role": "admin"})

        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )

        assert payload["role"] == "admin"

    def test_decode_token_invalid(self):
        assert decode_token("invalid.token.here") is None

    def test_decode_token_expired(self):
        """decode_token should return None for expired token."""
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-10))

        assert decode_token(token) is None

    def test_decode_token_wrong_secret(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": 9999999999, "type": "access"},
            "another-secret-that-is-definitely-long-enough",
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None

    def test_decode_token_without_subject(self):
        token = jwt.encode(
            {"exp": 9999999999, "type": "access"},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None
