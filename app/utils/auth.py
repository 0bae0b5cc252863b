"""
Authentication utilities for JWT token management and password hashing.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from app.config import settings
from app.utils.exceptions import (
    InvalidTokenError,
    ServerMisconfiguredError,
    TokenExpiredError
)
import logging

logger = logging.getLogger(__name__)


# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds
)


class TokenPayload:
    """JWT token payload structure."""

    def __init__(self, user_id: int, email: str, exp: datetime):
        self.user_id = user_id
        self.email = email
        self.exp = exp

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenPayload":
        """Create TokenPayload from dictionary."""
        return cls(
            user_id=int(data["sub"]),
            email=data["email"],
            exp=datetime.fromtimestamp(data["exp"], tz=timezone.utc)
        )


def get_signing_secret() -> str:
    """
    Return the configured signing secret.

    Read on every call so a secret removed or weakened at runtime is
    noticed before the next token is signed or verified.

    Raises:
        ServerMisconfiguredError: If the secret is missing or too short
    """
    secret = settings.jwt_secret_key
    if not secret:
        logger.error("JWT secret is not configured")
        raise ServerMisconfiguredError()
    if len(secret) < settings.min_secret_length:
        logger.error(f"JWT secret is shorter than {settings.min_secret_length} characters")
        raise ServerMisconfiguredError()
    return secret


def create_access_token(
    user_id: int,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a signed session token.

    Args:
        user_id: User's numeric ID
        email: User's email address
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string

    Raises:
        ServerMisconfiguredError: If the signing secret is unusable
    """
    secret = get_signing_secret()

    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.access_token_expire_days)

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "exp": now + expires_delta,
        "iat": now,
    }

    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> TokenPayload:
    """
    Verify and decode a session token.

    Args:
        token: JWT token string

    Returns:
        Decoded TokenPayload

    Raises:
        TokenExpiredError: If the token has expired
        InvalidTokenError: If the signature or payload is invalid
        ServerMisconfiguredError: If the signing secret is unusable
    """
    secret = get_signing_secret()

    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        logger.debug(f"Token rejected: {e}")
        raise InvalidTokenError()

    if not payload.get("sub") or not payload.get("email") or "exp" not in payload:
        raise InvalidTokenError("Invalid token payload")

    try:
        return TokenPayload.from_dict(payload)
    except (TypeError, ValueError):
        raise InvalidTokenError("Invalid token payload")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify password against hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)
