"""
Media service for listing image uploads and deletions.
Validates every file before anything is sent to object storage.
"""

from typing import List, Optional, Sequence, Tuple
from fastapi import UploadFile
from app.config import Settings, settings as default_settings
from app.storage import StorageClient, StorageError
from app.utils.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    InvalidInputError,
    UpstreamFailureError
)
import logging
import time
import uuid

logger = logging.getLogger(__name__)


def _basename(filename: Optional[str]) -> str:
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    return name or "image"


class MediaService:
    """Uploads listing images to the storage bucket and removes them by URL."""

    def __init__(self, storage: StorageClient, config: Optional[Settings] = None):
        self.storage = storage
        self.settings = config or default_settings

    @staticmethod
    def build_storage_key(owner_id: int, filename: Optional[str]) -> str:
        """
        Object key for an uploaded image.

        Keys are `listings/<owner>/<unix millis>-<8 hex>-<basename>`; the
        random part keeps simultaneous uploads of the same file apart.
        """
        millis = int(time.time() * 1000)
        token = uuid.uuid4().hex[:8]
        return f"listings/{owner_id}/{millis}-{token}-{_basename(filename)}"

    async def _read_validated(self, files: Sequence[UploadFile]) -> List[Tuple[UploadFile, bytes]]:
        if not files:
            raise InvalidInputError("No files uploaded")
        if len(files) > self.settings.max_upload_files:
            raise InvalidInputError(f"Maximum {self.settings.max_upload_files} images allowed")

        max_size = self.settings.max_file_size
        accepted = []
        for upload in files:
            content_type = upload.content_type or ""
            if not content_type.startswith("image/"):
                raise InvalidFileTypeError(upload.filename, upload.content_type)

            # Reject on the declared size before buffering the body
            if upload.size is not None and upload.size > max_size:
                raise FileTooLargeError(upload.filename, upload.size, max_size)

            content = await upload.read()
            if len(content) > max_size:
                raise FileTooLargeError(upload.filename, len(content), max_size)
            accepted.append((upload, content))

        return accepted

    async def upload_images(self, owner_id: int, files: Sequence[UploadFile]) -> List[str]:
        """
        Store images for a future listing.

        Args:
            owner_id: ID of the authenticated user
            files: One to five image files

        Returns:
            Public URLs, in the order the files were given

        Raises:
            InvalidInputError: If no files or too many files were sent
            InvalidFileTypeError: If a file is not an image
            FileTooLargeError: If a file exceeds the size limit
            UpstreamFailureError: If the storage service fails
        """
        accepted = await self._read_validated(list(files or []))

        urls = []
        for upload, content in accepted:
            key = self.build_storage_key(owner_id, upload.filename)
            try:
                urls.append(await self.storage.upload(key, content, upload.content_type))
            except StorageError as e:
                logger.error(f"Image upload failed for user {owner_id} after {len(urls)} files: {e}")
                raise UpstreamFailureError("Failed to upload images")

        logger.info(f"User {owner_id} uploaded {len(urls)} images")
        return urls

    async def delete_image(self, image_url: Optional[str]) -> str:
        """
        Remove a stored image by its public URL.

        Returns:
            The object key that was removed

        Raises:
            InvalidInputError: If the URL is missing or not a bucket URL
            UpstreamFailureError: If the storage service fails
        """
        if not image_url or not image_url.strip():
            raise InvalidInputError("Image URL is required")

        key = self.storage.key_from_url(image_url.strip())
        if key is None:
            raise InvalidInputError("Invalid image URL")

        try:
            await self.storage.remove([key])
        except StorageError as e:
            logger.error(f"Image delete failed for {key}: {e}")
            raise UpstreamFailureError("Failed to delete image")

        logger.info(f"Deleted image {key}")
        return key
