"""JWT handling for API authentication.

Tokens are issued by the platform's identity service; this module only
needs to verify them. ``create_access_token`` is kept for tooling and tests.
"""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from payaudit.config import settings
from payaudit.core.auth.schemas import TokenData
from payaudit.core.constants import ACCESS_TOKEN_JTI_LENGTH


def create_access_token(
    user_id: UUID,
    expires_delta: timedelta | None = None,
    additional_claims: dict[str, Any] | None = None,
) -> str:
    """Create a short-lived JWT access token.

    Args:
        user_id: The user's UUID
        expires_delta: Optional custom expiration time
        additional_claims: Optional extra claims to include

    Returns:
        Encoded JWT access token
    """
    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
        "iat": now,
        "jti": secrets.token_urlsafe(ACCESS_TOKEN_JTI_LENGTH),
    }
    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> TokenData | None:
    """Decode and validate a JWT token.

    Args:
        token: Encoded JWT

    Returns:
        TokenData if the token is valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    try:
        return TokenData(
            user_id=UUID(subject),
            exp=datetime.fromtimestamp(payload["exp"], tz=UTC),
            type=payload.get("type", "access"),
        )
    except (KeyError, ValueError):
        return None
