"""
Utility modules for the Classifieds Listing API.
"""

from .auth import (
    create_access_token,
    verify_token,
    get_signing_secret,
    hash_password,
    verify_password,
    TokenPayload
)

from .exceptions import (
    APIException,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    InternalServerError,
    ServerMisconfiguredError,
    UpstreamFailureError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "verify_token",
    "get_signing_secret",
    "hash_password",
    "verify_password",
    "TokenPayload",

    # Exceptions
    "APIException",
    "InvalidInputError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "InternalServerError",
    "ServerMisconfiguredError",
    "UpstreamFailureError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
]
