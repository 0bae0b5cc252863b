"""
Image upload API endpoints.
Files are proxied to object storage; listings reference the returned URLs.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from typing import List
from app.services.media import MediaService
from app.schemas.upload import UploadResponse, ImageDeleteRequest, MessageResponse
from app.schemas.error import get_error_responses
from app.utils.auth import TokenPayload
from app.utils.dependencies import get_media_service, get_current_identity


router = APIRouter(prefix="/upload", tags=["Images"])


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload images",
    description="Upload 1-5 images (5MB each) and get their public URLs",
    responses=get_error_responses(400, 401, 500)
)
async def upload_images(
    images: List[UploadFile] = File(..., description="Image files (multipart field `images`)"),
    identity: TokenPayload = Depends(get_current_identity),
    media_service: MediaService = Depends(get_media_service)
) -> UploadResponse:
    """
    Store uploaded images.

    Raises:
        InvalidInputError: If no files or more than five were sent
        InvalidFileTypeError: If a file is not an image
        FileTooLargeError: If a file is over the size limit
        UpstreamFailureError: If the storage service fails
    """
    urls = await media_service.upload_images(identity.user_id, images)
    return UploadResponse(message="Images uploaded successfully", urls=urls)


@router.delete(
    "/image",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete image",
    description="Remove a previously uploaded image by its public URL",
    responses=get_error_responses(400, 401, 500)
)
async def delete_image(
    delete_data: ImageDeleteRequest,
    identity: TokenPayload = Depends(get_current_identity),
    media_service: MediaService = Depends(get_media_service)
) -> MessageResponse:
    await media_service.delete_image(delete_data.image_url)
    return MessageResponse(message="Image deleted successfully")
