"""
Listing service for browsing and managing classified listings.
Handles required-field validation, ownership checks and search filters.
"""

from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from app.database import utcnow
from app.repositories.listing import ListingRepository, ListingSearchFilters
from app.repositories.user import UserRepository
from app.models.listing import Listing
from app.schemas.listing import ListingBase
from app.utils.exceptions import (
    APIException,
    InternalServerError,
    InvalidInputError,
    ListingNotFoundError,
    ListingOwnershipError,
    UserNotFoundError
)
import logging

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "category", "location", "county", "phone")
MIN_IMAGES = 1
MAX_IMAGES = 5


class ListingService:
    """
    Listing service for CRUD operations on classified listings.
    Only the owner of a listing may replace or delete it.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.user_repo = UserRepository(db_session)

    async def list_listings(
        self,
        category: Optional[str] = None,
        location: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Listing]:
        """
        Browse listings, newest first.

        Args:
            category: Exact category match
            location: Exact county match
            search: Case-insensitive substring of title or description

        Returns:
            Matching listings with owner contact details loaded
        """
        filters = ListingSearchFilters(category=category, location=location, search=search)
        try:
            return await self.listing_repo.search(filters)
        except SQLAlchemyError as e:
            logger.error(f"Failed to search listings: {e}")
            raise InternalServerError("Failed to fetch listings")

    async def get_listing(self, listing_id: int) -> Listing:
        """
        Get a single listing.

        Raises:
            ListingNotFoundError: If the listing does not exist
        """
        try:
            listing = await self.listing_repo.get_with_owner(listing_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get listing {listing_id}: {e}")
            raise InternalServerError("Failed to fetch listing")

        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing

    async def list_user_listings(self, owner_id: int) -> List[Listing]:
        """Listings owned by a user, newest first."""
        try:
            return await self.listing_repo.search(ListingSearchFilters(user_id=owner_id))
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch listings for user {owner_id}: {e}")
            raise InternalServerError("Failed to fetch listings")

    async def create_listing(self, owner_id: int, listing_data: ListingBase) -> Listing:
        """
        Create a listing owned by the caller.

        Args:
            owner_id: ID of the authenticated user
            listing_data: Listing fields

        Returns:
            Created listing with owner loaded

        Raises:
            InvalidInputError: If required fields are missing or the image count is wrong
            UserNotFoundError: If the owner account no longer exists
        """
        fields = self._validate_listing_fields(listing_data)

        try:
            if await self.user_repo.get_by_id(owner_id) is None:
                raise UserNotFoundError(owner_id)

            fields["user_id"] = owner_id
            listing = await self.listing_repo.create_listing(fields)
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to create listing for user {owner_id}: {e}")
            raise InternalServerError("Failed to create listing")

        logger.info(f"Listing created by user {owner_id}: {listing.title} (ID: {listing.id})")
        return listing

    async def update_listing(self, listing_id: int, owner_id: int, listing_data: ListingBase) -> Listing:
        """
        Replace every editable field of a listing.

        Existence is checked before ownership, and ownership before the
        payload, so a stranger learns nothing from validation messages.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingOwnershipError: If the caller does not own it
            InvalidInputError: If the replacement is incomplete
        """
        try:
            await self._check_ownership(listing_id, owner_id)

            fields = self._validate_listing_fields(listing_data)
            fields["updated_at"] = utcnow()

            listing = await self.listing_repo.replace_listing(listing_id, fields)
            if listing is None:
                raise ListingNotFoundError(listing_id)
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to update listing {listing_id}: {e}")
            raise InternalServerError("Failed to update listing")

        logger.info(f"Listing updated by user {owner_id}: {listing_id}")
        return listing

    async def delete_listing(self, listing_id: int, owner_id: int) -> None:
        """
        Delete a listing. Its stored images are left in the bucket.

        Raises:
            ListingNotFoundError: If the listing does not exist
            ListingOwnershipError: If the caller does not own it
        """
        try:
            await self._check_ownership(listing_id, owner_id)

            if not await self.listing_repo.delete(listing_id):
                raise ListingNotFoundError(listing_id)
        except APIException:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete listing {listing_id}: {e}")
            raise InternalServerError("Failed to delete listing")

        logger.info(f"Listing deleted by user {owner_id}: {listing_id}")

    async def _check_ownership(self, listing_id: int, owner_id: int) -> None:
        current_owner = await self.listing_repo.get_owner_id(listing_id)
        if current_owner is None:
            raise ListingNotFoundError(listing_id)
        if current_owner != owner_id:
            logger.warning(f"User {owner_id} attempted to modify listing {listing_id} owned by {current_owner}")
            raise ListingOwnershipError()

    def _validate_listing_fields(self, listing_data: ListingBase) -> Dict[str, Any]:
        """
        Check required fields and the image count.

        Returns:
            Column values for the listing table
        """
        missing = [
            field for field in REQUIRED_FIELDS
            if not (getattr(listing_data, field) or "").strip()
        ]
        if missing:
            raise InvalidInputError(
                "Missing required fields",
                field_errors=[{"field": field, "message": "Field is required"} for field in missing]
            )

        images = list(listing_data.images or [])
        if not MIN_IMAGES <= len(images) <= MAX_IMAGES:
            raise InvalidInputError(
                f"Please provide {MIN_IMAGES}-{MAX_IMAGES} images",
                field_errors=[{"field": "images", "message": f"{len(images)} images given"}]
            )

        if any(not url.strip() for url in images):
            raise InvalidInputError(
                "Image URLs must not be blank",
                field_errors=[{"field": "images", "message": "Image URL is required"}]
            )

        return {
            "title": listing_data.title.strip(),
            "description": listing_data.description,
            "category": listing_data.category.strip(),
            "custom_category": listing_data.custom_category,
            "location": listing_data.location.strip(),
            "county": listing_data.county.strip(),
            "phone": listing_data.phone.strip(),
            "amenities": list(listing_data.amenities or []),
            "images": images,
        }
