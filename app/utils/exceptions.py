"""
Custom exception classes for the Classifieds Listing API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class InvalidInputError(APIException):
    """Missing or malformed input."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, Any]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="INVALID_INPUT"
        )
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[Any] = None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):
    """
    Unique value already taken.
    Reported as 400 so clients can show the message next to the field.
    """

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="CONFLICT"
        )
        self.field = field


class InternalServerError(APIException):
    """Internal server error exception."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_SERVER_ERROR"
        )


class ServerMisconfiguredError(APIException):
    """Signing secret missing or too weak; no token is ever issued in this state."""

    def __init__(self, detail: str = "Server configuration error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="SERVER_MISCONFIGURED"
        )


class UpstreamFailureError(APIException):
    """Object storage request failed."""

    def __init__(self, detail: str = "Storage service error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="UPSTREAM_FAILURE"
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    """JWT token expired exception."""

    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Invalid JWT token exception."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class DuplicateEmailError(ConflictError):
    def __init__(self):
        super().__init__("Email already registered", field="email")


class DuplicatePhoneError(ConflictError):
    def __init__(self):
        super().__init__("Phone number already registered", field="phone")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: Optional[int] = None):
        super().__init__("User", user_id)


# Listing specific exceptions
class ListingNotFoundError(NotFoundError):
    """Listing not found exception."""

    def __init__(self, listing_id: Optional[int] = None):
        super().__init__("Listing", listing_id)


class ListingOwnershipError(ForbiddenError):
    """Listing ownership violation exception."""

    def __init__(self, detail: str = "Not authorized to modify this listing"):
        super().__init__(detail)


# File upload exceptions
class InvalidFileTypeError(APIException):
    """Uploaded file is not an image."""

    def __init__(self, filename: Optional[str], content_type: Optional[str]):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only image files are allowed ('{filename}' is {content_type or 'unknown'})",
            error_code="INVALID_FILE_TYPE"
        )


class FileTooLargeError(APIException):
    """Uploaded file exceeds the size limit."""

    def __init__(self, filename: Optional[str], size: int, max_size: int):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File '{filename}' is {size} bytes, maximum allowed size is {max_size} bytes",
            error_code="FILE_TOO_LARGE"
        )
