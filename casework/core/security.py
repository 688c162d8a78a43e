"""Session tokens: HS256 JWTs carried in the session cookie."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from casework.core.config import settings


JWT_ALGORITHM = "HS256"


def create_session_token(user_id: UUID, role: str, token_version: int) -> str:
    """
    Sign a session token for a profile with the current JWT_SECRET.

    token_version is compared against the profile on every request, so
    incrementing it on the profile revokes outstanding tokens.
    """
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "role": role,
        "token_version": token_version,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str) -> dict:
    """
    Verify a session token and return its claims.

    The previous secret is still accepted while a rotation is in progress.

    Raises:
        jwt.InvalidTokenError: If no configured secret verifies the token
    """
    error: jwt.InvalidTokenError | None = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
        except jwt.InvalidTokenError as exc:
            error = exc
    raise error or jwt.InvalidTokenError("No JWT secret configured")
