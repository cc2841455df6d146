"""
Authentication utilities for session tokens and one-time account tokens.
Provides JWT session issuing and validation and random token generation.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from realty.config import settings
import secrets
import uuid


class SessionPayload:
    """JWT session payload structure."""

    def __init__(self, user_id: str, name: str, exp: datetime):
        self.user_id = user_id
        self.name = name
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionPayload":
        return cls(
            user_id=data["sub"],
            name=data.get("name", ""),
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def create_session_token(
    user_id: uuid.UUID,
    name: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create the signed session credential stored in the session cookie.

    Args:
        user_id: User's UUID
        name: User's display name
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=settings.session_expire_hours))

    to_encode = {
        "sub": str(user_id),
        "name": name,
        "exp": expire,
        "iat": now,
        "type": "session"
    }

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def verify_session_token(token: str) -> SessionPayload:
    """
    Verify and decode a session token.

    Raises:
        JWTError: If token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise
    except Exception as e:
        raise JWTError(f"Token validation error: {str(e)}")

    if payload.get("type") != "session":
        raise JWTError("Invalid token type")

    if not payload.get("sub"):
        raise JWTError("Invalid token payload")

    return SessionPayload.from_dict(payload)


def generate_account_token() -> str:
    """Random single-use token for account confirmation and password reset."""
    return secrets.token_urlsafe(24)
