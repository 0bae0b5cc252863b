"""
User model for account registration and authentication.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from email_validator import validate_email, EmailNotValidError


class User(Base):
    """
    User account owning classified listings.
    Email and phone uniqueness are enforced by named database constraints.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("phone", name="uq_users_phone"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Lowercased email address"
    )

    phone: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Contact phone number"
    )

    password_hash: Mapped[str] = mapped_column(
        "password",
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email})>"

    @staticmethod
    def normalize_email(email: str) -> str:
        """Lowercase and trim an email address."""
        return email.strip().lower()

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        normalized = cls.normalize_email(email)
        try:
            validate_email(normalized, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")
        return normalized

    def to_dict(self, include_created_at: bool = False) -> dict:
        """
        Convert user to dictionary (excluding the password hash).

        Returns:
            Dictionary representation of user
        """
        data = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
        }
        if include_created_at:
            data["created_at"] = self.created_at
        return data
