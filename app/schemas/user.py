"""
Pydantic schemas for registration, login and user responses.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class RegisterRequest(BaseModel):
    """
    Registration request schema.
    Presence and length rules are enforced by the auth service so that
    every caller gets the same error format.
    """

    name: Optional[str] = Field(None, description="Display name", examples=["Jane Wanjiru"])
    email: Optional[str] = Field(None, description="Email address", examples=["jane@example.com"])
    phone: Optional[str] = Field(None, description="Contact phone number", examples=["+254712345678"])
    password: Optional[str] = Field(
        None,
        description="Password (minimum 6 characters)",
        examples=["secret123"]
    )


class LoginRequest(BaseModel):
    """Login request schema."""

    email: Optional[str] = Field(None, description="Email address", examples=["jane@example.com"])
    password: Optional[str] = Field(None, description="Password", examples=["secret123"])


class UserResponse(BaseModel):
    """User response schema (excluding the password hash)."""

    id: int = Field(..., description="User's unique identifier", examples=[1])
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")
    phone: str = Field(..., description="Contact phone number")


class UserProfileResponse(UserResponse):
    """User profile including account creation time."""

    created_at: datetime = Field(..., description="Account creation timestamp")


class AuthResponse(BaseModel):
    """Response returned by register and login."""

    message: str = Field(..., examples=["Login successful"])
    user: UserResponse
    token: str = Field(
        ...,
        description="Bearer token for the Authorization header",
        examples=["eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."]
    )


class CurrentUserResponse(BaseModel):
    """Response for the current-user endpoint."""

    user: UserProfileResponse
