"""
Password hashing and JSON Web Tokens.

Passwords (and password-reset answers) are stored as bcrypt hashes.
Tokens are signed with the configured secret and carry the user id
under the ``_id`` claim.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
import jwt

from core.config import settings


class TokenError(Exception):
    """Token is missing, malformed, expired or badly signed."""
    pass


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_token(
    user_id: str,
    *,
    secret: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """
    Issue a signed token for a user.

    Args:
        user_id: Identifier stored in the ``_id`` claim
        secret: Signing secret (defaults to settings.jwt_secret)
        expires_in: Lifetime (defaults to settings.jwt_expire_days)
    """
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(days=settings.jwt_expire_days)
    payload = {
        "_id": user_id,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, *, secret: Optional[str] = None) -> dict[str, Any]:
    """
    Verify a token and return its claims.

    Raises:
        TokenError: If the token cannot be trusted
    """
    try:
        claims = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenError("Invalid token") from e

    if not isinstance(claims.get("_id"), str):
        raise TokenError("Token has no subject")
    return claims


def extract_token(authorization: Optional[str]) -> Optional[str]:
    """Accept either a raw token or ``Bearer <token>`` in the header."""
    if not authorization:
        return None
    value = authorization.strip()
    scheme, _, credentials = value.partition(" ")
    if credentials and scheme.lower() == "bearer":
        return credentials.strip() or None
    return value
