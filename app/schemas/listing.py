"""
Pydantic schemas for listing requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ListingBase(BaseModel):
    """
    Editable listing fields.
    Required fields and the image count are checked by the listing service.
    """

    title: Optional[str] = Field(None, max_length=255, examples=["2 bedroom apartment, Kilimani"])
    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[str] = Field(None, max_length=100, examples=["apartment"])
    custom_category: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255, examples=["Kilimani"])
    county: Optional[str] = Field(None, max_length=100, examples=["Nairobi"])
    phone: Optional[str] = Field(None, max_length=50, examples=["+254712345678"])
    amenities: Optional[List[str]] = Field(None, examples=[["parking", "wifi"]])
    images: Optional[List[str]] = Field(
        None,
        description="Public URLs returned by the upload endpoint (1-5)"
    )


class ListingCreate(ListingBase):
    """Schema for creating a new listing."""

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "2 bedroom apartment, Kilimani",
                "description": "Spacious apartment close to Yaya Centre.",
                "category": "apartment",
                "location": "Kilimani",
                "county": "Nairobi",
                "phone": "+254712345678",
                "amenities": ["parking", "wifi"],
                "images": ["https://project.supabase.co/storage/v1/object/public/house-images/listings/1/a.jpg"]
            }
        }
    }


class ListingUpdate(ListingBase):
    """Schema for replacing a listing; every field is overwritten."""


class ListingResponse(BaseModel):
    """Listing with its owner's contact details."""

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    category: str
    custom_category: Optional[str] = None
    location: str
    county: str
    phone: str
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    owner_name: Optional[str] = None
    owner_phone: Optional[str] = None
    owner_email: Optional[str] = None


class ListingEnvelope(BaseModel):
    listing: ListingResponse


class ListingMutationResponse(BaseModel):
    message: str
    listing: ListingResponse


class ListingListResponse(BaseModel):
    listings: List[ListingResponse]
