"""
Database models for the Classifieds Listing API.
"""

from app.models.user import User
from app.models.listing import Listing

__all__ = [
    "User",
    "Listing",
]
