"""
User repository for registration and login lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.user import User
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user accounts."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Insert a new user.

        Args:
            user_data: name, email, phone and password_hash

        Returns:
            Created user instance

        Raises:
            IntegrityError: If the email or phone is already taken
        """
        created_user = await self.create(user_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = User.normalize_email(email)
        result = await self.db.execute(select(User).where(User.email == normalized_email))
        return result.scalar_one_or_none()

    async def email_exists(self, email: str) -> bool:
        normalized_email = User.normalize_email(email)
        result = await self.db.execute(select(User.id).where(User.email == normalized_email))
        return result.first() is not None
