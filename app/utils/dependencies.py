"""
FastAPI dependency injection utilities for authentication, services and storage.
Provides reusable dependencies for route protection and identity extraction.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db
from app.services.auth import AuthService
from app.services.listing import ListingService
from app.services.media import MediaService
from app.storage import StorageClient
from app.utils.auth import TokenPayload, verify_token
from app.utils.exceptions import ServerMisconfiguredError, UnauthorizedError


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_listing_service(db: AsyncSession = Depends(get_db)) -> ListingService:
    """
    Get listing service instance.

    Args:
        db: Database session

    Returns:
        ListingService instance
    """
    return ListingService(db)


def get_storage_client(request: Request) -> StorageClient:
    """Storage client created at startup."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise ServerMisconfiguredError("Storage is not configured")
    return storage


async def get_media_service(storage: StorageClient = Depends(get_storage_client)) -> MediaService:
    return MediaService(storage, settings)


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """
    Verify the bearer token and attach the caller's identity to the request.

    Args:
        request: Incoming request
        credentials: HTTP Bearer credentials

    Returns:
        Token payload with user_id and email

    Raises:
        UnauthorizedError: If no bearer token was sent
        TokenExpiredError: If the token is expired
        InvalidTokenError: If the token is malformed or the signature is wrong
        ServerMisconfiguredError: If the signing secret is unusable
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    identity = verify_token(credentials.credentials)
    request.state.identity = identity
    return identity
