"""
Listing model for property classified advertisements.
"""

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base, utcnow
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


# PostgreSQL arrays, stored as JSON on SQLite
StringArray = ARRAY(Text).with_variant(JSON(), "sqlite")


class Listing(Base):
    """
    Property advertisement owned by a user.
    Holds between one and five image URLs served by the object store.
    """

    __tablename__ = "listings"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who owns this listing"
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Listing title"
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-text description"
    )

    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Listing category"
    )

    custom_category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="User supplied category when none of the standard ones fit"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Street, estate or town"
    )

    county: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Region used by the location filter"
    )

    phone: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Contact phone for this listing"
    )

    amenities: Mapped[List[str]] = mapped_column(
        StringArray,
        nullable=False,
        default=list,
    )

    images: Mapped[List[str]] = mapped_column(
        StringArray,
        nullable=False,
        comment="Public image URLs, in display order"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    owner: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        """String representation of the listing."""
        return f"<Listing(id={self.id}, title={self.title[:30]})>"

    def to_dict(self, include_owner_email: bool = False) -> dict:
        """
        Convert listing to dictionary with the owner's contact details.

        Args:
            include_owner_email: Whether to expose the owner's email

        Returns:
            Dictionary representation of listing
        """
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "custom_category": self.custom_category,
            "location": self.location,
            "county": self.county,
            "phone": self.phone,
            "amenities": list(self.amenities or []),
            "images": list(self.images or []),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "owner_name": self.owner.name if self.owner else None,
            "owner_phone": self.owner.phone if self.owner else None,
        }
        if include_owner_email:
            data["owner_email"] = self.owner.email if self.owner else None
        return data
