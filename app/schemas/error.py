"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["email"])
    message: str = Field(..., description="Human-readable error message")
    type: Optional[str] = Field(None, description="Error type identifier", examples=["missing"])


class ErrorBody(BaseModel):
    """Schema for standardized error bodies."""

    code: str = Field(..., description="Error code identifier", examples=["INVALID_INPUT"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
    details: Optional[List[ErrorDetail]] = None


class APIErrorResponse(BaseModel):
    """Top-level error response wrapper."""

    error: ErrorBody


def _example(code: str, message: str) -> Dict[str, Any]:
    return {
        "application/json": {
            "example": {
                "error": {
                    "code": code,
                    "message": message,
                    "timestamp": "2024-01-01T00:00:00Z",
                    "request_id": "abc12345"
                }
            }
        }
    }


COMMON_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {
        "description": "Bad Request - Invalid input, duplicate value or rejected file",
        "model": APIErrorResponse,
        "content": _example("INVALID_INPUT", "Missing required fields"),
    },
    401: {
        "description": "Unauthorized - Missing, invalid or expired token",
        "model": APIErrorResponse,
        "content": _example("UNAUTHORIZED", "Authentication token required"),
    },
    403: {
        "description": "Forbidden - Authenticated user does not own the resource",
        "model": APIErrorResponse,
        "content": _example("FORBIDDEN", "Not authorized to modify this listing"),
    },
    404: {
        "description": "Not Found - Resource does not exist",
        "model": APIErrorResponse,
        "content": _example("NOT_FOUND", "Listing not found with ID: 42"),
    },
    500: {
        "description": "Internal Server Error",
        "model": APIErrorResponse,
        "content": _example("INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."),
    },
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }
