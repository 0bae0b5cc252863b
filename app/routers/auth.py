"""
Authentication API endpoints for registration, login and the current user.
"""

from fastapi import APIRouter, Depends, status
from app.services.auth import AuthService
from app.schemas.user import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    CurrentUserResponse,
    UserResponse,
    UserProfileResponse
)
from app.schemas.error import get_error_responses
from app.utils.auth import TokenPayload
from app.utils.dependencies import get_auth_service, get_current_identity


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and return a session token",
    responses=get_error_responses(400, 500)
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Create a new account.

    Raises:
        InvalidInputError: If a field is missing or invalid
        ConflictError: If the email or phone is already registered
    """
    user, token = await auth_service.register(
        name=register_data.name,
        email=register_data.email,
        phone=register_data.phone,
        password=register_data.password
    )

    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user.to_dict()),
        token=token
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password, returns a session token",
    responses=get_error_responses(400, 401, 500)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate user and return a session token.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user, token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )

    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user.to_dict()),
        token=token
    )


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get the account behind the bearer token",
    responses=get_error_responses(401, 404)
)
async def get_current_user_info(
    identity: TokenPayload = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service)
) -> CurrentUserResponse:
    user = await auth_service.get_profile(identity.user_id)
    return CurrentUserResponse(
        user=UserProfileResponse.model_validate(user.to_dict(include_created_at=True))
    )
