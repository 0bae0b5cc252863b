"""
Authentication service for registration, login and the current-user profile.
Handles input validation, password hashing and session token issuance.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from app.config import settings
from app.repositories.user import UserRepository
from app.models.user import User
from app.services.error_handler import ErrorHandlerService
from app.utils.auth import (
    create_access_token,
    get_signing_secret,
    hash_password,
    verify_password
)
from app.utils.exceptions import (
    APIException,
    ConflictError,
    DuplicateEmailError,
    InternalServerError,
    InvalidCredentialsError,
    InvalidInputError,
    UserNotFoundError
)
import logging

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthService:
    """
    Authentication service for account creation and credential checks.
    Bcrypt work runs in the thread pool so the event loop is not blocked.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(
        self,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        password: Optional[str]
    ) -> Tuple[User, str]:
        """
        Create an account and sign a session token for it.

        Args:
            name: Display name
            email: Email address, stored lowercased
            phone: Contact phone number
            password: Plain text password

        Returns:
            Tuple of (user, token)

        Raises:
            InvalidInputError: If a field is missing, the email is malformed
                or the password is too short
            ConflictError: If the email or phone is already registered
            ServerMisconfiguredError: If no token can be signed
        """
        missing = [
            field for field, value in (
                ("name", name), ("email", email), ("phone", phone), ("password", password)
            )
            if _blank(value)
        ]
        if missing:
            raise InvalidInputError(
                "All fields are required",
                field_errors=[{"field": field, "message": "Field is required"} for field in missing]
            )

        if len(password.strip()) < settings.min_password_length:
            raise InvalidInputError(
                f"Password must be at least {settings.min_password_length} characters",
                field_errors=[{"field": "password", "message": "Password too short"}]
            )

        try:
            normalized_email = User.validate_email_format(email)
        except ValueError as e:
            raise InvalidInputError(str(e), field_errors=[{"field": "email", "message": "Invalid email"}])

        # Refuse before persisting so a misconfigured server never leaves tokenless accounts
        get_signing_secret()

        try:
            if await self.user_repo.email_exists(normalized_email):
                raise DuplicateEmailError()

            password_hash = await run_in_threadpool(hash_password, password)
            user = await self.user_repo.create_user({
                "name": name.strip(),
                "email": normalized_email,
                "phone": phone.strip(),
                "password_hash": password_hash,
            })
        except APIException:
            raise
        except IntegrityError as e:
            conflict = ErrorHandlerService.conflict_from_integrity_error(e)
            if conflict is None:
                logger.error(f"Unexpected integrity error registering {normalized_email}: {e}")
                conflict = ConflictError("Account already exists")
            raise conflict
        except SQLAlchemyError as e:
            logger.error(f"Registration failed for {normalized_email}: {e}")
            raise InternalServerError("Registration failed. Please try again later.")

        token = create_access_token(user_id=user.id, email=user.email)
        logger.info(f"User registered: {user.email} (ID: {user.id})")
        return user, token

    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        """
        Check credentials and sign a session token.

        Unknown emails and wrong passwords fail identically.

        Raises:
            InvalidInputError: If email or password is missing
            InvalidCredentialsError: If the credentials do not match
            ServerMisconfiguredError: If no token can be signed
        """
        if _blank(email) or not password:
            raise InvalidInputError("Email and password are required")

        try:
            user = await self.user_repo.get_by_email(email)
        except SQLAlchemyError as e:
            logger.error(f"Login lookup failed for {email}: {e}")
            raise InternalServerError("Login failed. Please try again later.")

        if user is None or not await run_in_threadpool(verify_password, password, user.password_hash):
            logger.warning(f"Failed login attempt for email: {User.normalize_email(email)}")
            raise InvalidCredentialsError()

        token = create_access_token(user_id=user.id, email=user.email)
        logger.info(f"User logged in: {user.email}")
        return user, token

    async def get_profile(self, user_id: int) -> User:
        """
        Get the account behind a verified token.

        Raises:
            UserNotFoundError: If the account no longer exists
        """
        try:
            user = await self.user_repo.get_by_id(user_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load user {user_id}: {e}")
            raise InternalServerError("Failed to fetch user")

        if user is None:
            raise UserNotFoundError()
        return user
