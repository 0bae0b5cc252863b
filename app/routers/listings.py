"""
Listing API endpoints for browsing and managing classified listings.
Browsing is public; creating, replacing and deleting require a bearer token.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from app.services.listing import ListingService
from app.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingEnvelope,
    ListingMutationResponse,
    ListingListResponse
)
from app.schemas.upload import MessageResponse
from app.schemas.error import get_error_responses
from app.utils.auth import TokenPayload
from app.utils.dependencies import get_listing_service, get_current_identity


router = APIRouter(prefix="/listings", tags=["Listings"])


@router.get(
    "",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="Browse listings",
    description="List listings newest first, optionally filtered by category, county or text",
    responses=get_error_responses(500)
)
async def list_listings(
    category: Optional[str] = Query(None, description="Exact category"),
    location: Optional[str] = Query(None, description="Exact county"),
    search: Optional[str] = Query(None, description="Text to find in title or description"),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingListResponse:
    listings = await listing_service.list_listings(
        category=category,
        location=location,
        search=search
    )
    return ListingListResponse(
        listings=[ListingResponse.model_validate(listing.to_dict()) for listing in listings]
    )


@router.get(
    "/user/my-listings",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="My listings",
    description="Listings owned by the authenticated user, newest first",
    responses=get_error_responses(401)
)
async def list_my_listings(
    identity: TokenPayload = Depends(get_current_identity),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingListResponse:
    listings = await listing_service.list_user_listings(identity.user_id)
    return ListingListResponse(
        listings=[ListingResponse.model_validate(listing.to_dict()) for listing in listings]
    )


@router.get(
    "/{listing_id}",
    response_model=ListingEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Get listing",
    description="Get a single listing with the owner's contact details",
    responses=get_error_responses(404)
)
async def get_listing(
    listing_id: int,
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingEnvelope:
    listing = await listing_service.get_listing(listing_id)
    return ListingEnvelope(
        listing=ListingResponse.model_validate(listing.to_dict(include_owner_email=True))
    )


@router.post(
    "",
    response_model=ListingMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description="Create a listing owned by the authenticated user",
    responses=get_error_responses(400, 401)
)
async def create_listing(
    listing_data: ListingCreate,
    identity: TokenPayload = Depends(get_current_identity),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingMutationResponse:
    """
    Create a new listing.

    Raises:
        InvalidInputError: If required fields are missing or there are not 1-5 images
    """
    listing = await listing_service.create_listing(identity.user_id, listing_data)
    return ListingMutationResponse(
        message="Listing created successfully",
        listing=ListingResponse.model_validate(listing.to_dict())
    )


@router.put(
    "/{listing_id}",
    response_model=ListingMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace listing",
    description="Overwrite every field of a listing you own",
    responses=get_error_responses(400, 401, 403, 404)
)
async def update_listing(
    listing_id: int,
    listing_data: ListingUpdate,
    identity: TokenPayload = Depends(get_current_identity),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingMutationResponse:
    """
    Replace a listing.

    Raises:
        ListingNotFoundError: If the listing does not exist
        ListingOwnershipError: If the caller is not the owner
        InvalidInputError: If the replacement is incomplete
    """
    listing = await listing_service.update_listing(listing_id, identity.user_id, listing_data)
    return ListingMutationResponse(
        message="Listing updated successfully",
        listing=ListingResponse.model_validate(listing.to_dict())
    )


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete listing",
    description="Delete a listing you own",
    responses=get_error_responses(401, 403, 404)
)
async def delete_listing(
    listing_id: int,
    identity: TokenPayload = Depends(get_current_identity),
    listing_service: ListingService = Depends(get_listing_service)
) -> MessageResponse:
    await listing_service.delete_listing(listing_id, identity.user_id)
    return MessageResponse(message="Listing deleted successfully")
