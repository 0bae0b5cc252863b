"""
Listing repository with filtered search and ownership lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import contains_eager
from app.repositories.base import BaseRepository
from app.models.listing import Listing
from app.models.user import User
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)


class ListingSearchFilters:
    """
    Optional predicates for listing searches.
    Empty strings are treated the same as missing values.
    """

    def __init__(
        self,
        category: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
        user_id: Optional[int] = None
    ):
        self.category = category or None
        self.location = location or None
        self.search = search or None
        self.user_id = user_id


class ListingRepository(BaseRepository[Listing]):
    """Repository for listings, always loading the owner with a join."""

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    def _base_query(self):
        return (
            select(Listing)
            .join(Listing.owner)
            .options(contains_eager(Listing.owner))
            .execution_options(populate_existing=True)
        )

    async def search(self, filters: ListingSearchFilters) -> List[Listing]:
        """
        Search listings, newest first.

        Args:
            filters: Optional category, location (county), search text and owner

        Returns:
            Matching listings with owners loaded
        """
        query = self._base_query()

        if filters.category:
            query = query.where(Listing.category == filters.category)

        if filters.location:
            query = query.where(Listing.county == filters.location)

        if filters.search:
            query = query.where(
                or_(
                    Listing.title.icontains(filters.search, autoescape=True),
                    Listing.description.icontains(filters.search, autoescape=True)
                )
            )

        if filters.user_id is not None:
            query = query.where(Listing.user_id == filters.user_id)

        query = query.order_by(Listing.created_at.desc(), Listing.id.desc())

        result = await self.db.execute(query)
        listings = list(result.scalars().unique().all())
        logger.debug(f"Listing search returned {len(listings)} rows")
        return listings

    async def get_with_owner(self, listing_id: int) -> Optional[Listing]:
        """
        Get a listing joined with its owner.

        Args:
            listing_id: ID of the listing

        Returns:
            Listing with owner loaded, or None if not found
        """
        result = await self.db.execute(self._base_query().where(Listing.id == listing_id))
        return result.scalars().unique().one_or_none()

    async def get_owner_id(self, listing_id: int) -> Optional[int]:
        """Return the owning user's ID, or None if the listing does not exist."""
        result = await self.db.execute(select(Listing.user_id).where(Listing.id == listing_id))
        return result.scalar_one_or_none()

    async def create_listing(self, listing_data: Dict[str, Any]) -> Listing:
        created = await self.create(listing_data)
        logger.info(f"Created listing: {created.title} (ID: {created.id})")
        return await self.get_with_owner(created.id)

    async def replace_listing(self, listing_id: int, listing_data: Dict[str, Any]) -> Optional[Listing]:
        """
        Overwrite every editable field of a listing.

        Args:
            listing_id: ID of the listing
            listing_data: Complete set of editable fields

        Returns:
            Updated listing, or None if it no longer exists
        """
        updated = await self.update(listing_id, listing_data)
        if not updated:
            return None
        return await self.get_with_owner(listing_id)
