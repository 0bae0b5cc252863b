"""
Repository layer for data access operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.listing import ListingRepository, ListingSearchFilters
from app.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ListingRepository",
    "ListingSearchFilters",
    "UserRepository"
]
