"""
Pydantic schemas for request/response validation.
"""

# User and authentication schemas
from .user import (
    RegisterRequest,
    LoginRequest,
    UserResponse,
    UserProfileResponse,
    AuthResponse,
    CurrentUserResponse
)

# Listing schemas
from .listing import (
    ListingBase,
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingEnvelope,
    ListingMutationResponse,
    ListingListResponse
)

# Upload schemas
from .upload import (
    UploadResponse,
    ImageDeleteRequest,
    MessageResponse
)

from .error import APIErrorResponse, get_error_responses

__all__ = [
    # User
    "RegisterRequest",
    "LoginRequest",
    "UserResponse",
    "UserProfileResponse",
    "AuthResponse",
    "CurrentUserResponse",

    # Listing
    "ListingBase",
    "ListingCreate",
    "ListingUpdate",
    "ListingResponse",
    "ListingEnvelope",
    "ListingMutationResponse",
    "ListingListResponse",

    # Upload
    "UploadResponse",
    "ImageDeleteRequest",
    "MessageResponse",

    # Errors
    "APIErrorResponse",
    "get_error_responses"
]
