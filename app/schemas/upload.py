"""
Pydantic schemas for image upload and deletion.
"""

from pydantic import BaseModel, Field
from typing import Optional, List


class UploadResponse(BaseModel):
    """Public URLs of the stored images, in upload order."""

    message: str = Field(..., examples=["Images uploaded successfully"])
    urls: List[str]


class ImageDeleteRequest(BaseModel):
    """Image deletion request; accepts `imageUrl` or `image_url`."""

    image_url: Optional[str] = Field(
        None,
        alias="imageUrl",
        description="Public URL previously returned by the upload endpoint"
    )

    model_config = {"populate_by_name": True}


class MessageResponse(BaseModel):
    message: str
