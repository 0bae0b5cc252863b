"""Object storage HTTP client.

Talks to a Supabase-compatible storage REST API:
- POST   /storage/v1/object/<bucket>/<key>     upload (x-upsert: false)
- DELETE /storage/v1/object/<bucket>           remove {"prefixes": [...]}
- GET    /storage/v1/object/public/<bucket>/<key> public download URL
"""

import logging
from typing import List, Optional
from urllib.parse import quote, unquote

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage service rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StorageClient:
    """Client for a single storage bucket.

    The underlying `httpx.AsyncClient` is owned by the caller so one
    connection pool can be shared across requests.
    """

    def __init__(self, base_url: str, api_key: str, bucket: str, http_client: httpx.AsyncClient):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.http = http_client
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "apikey": api_key,
        }

    @classmethod
    def from_settings(cls, config: Settings, http_client: httpx.AsyncClient) -> "StorageClient":
        return cls(config.storage_url, config.storage_key, config.storage_bucket, http_client)

    @property
    def path_marker(self) -> str:
        """Segment separating the bucket from the object key in public URLs."""
        return f"/{self.bucket}/"

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Extract the object key from a public URL, or None if it is not one of ours."""
        parts = url.split(self.path_marker, 1)
        if len(parts) < 2 or not parts[1]:
            return None
        return unquote(parts[1])

    async def upload(self, key: str, content: bytes, content_type: str) -> str:
        """
        Store an object without overwriting an existing key.

        Returns the object's public URL.
        """
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(key)}"
        headers = {
            **self.headers,
            "Content-Type": content_type,
            "x-upsert": "false",
        }

        try:
            response = await self.http.post(url, content=content, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_text = e.response.text[:200] if e.response.text else "No response body"
            logger.error(f"Storage upload failed for {key}: {e.response.status_code} - {error_text}")
            raise StorageError(f"Upload rejected with status {e.response.status_code}", e.response.status_code)
        except httpx.HTTPError as e:
            logger.error(f"Storage upload failed for {key}: {e}")
            raise StorageError(f"Upload failed: {e}")

        logger.info(f"Stored object {key} ({len(content)} bytes)")
        return self.public_url(key)

    async def remove(self, keys: List[str]) -> None:
        """Delete objects by key. Keys that no longer exist are not an error."""
        url = f"{self.base_url}/storage/v1/object/{self.bucket}"

        try:
            response = await self.http.request(
                "DELETE", url, json={"prefixes": keys}, headers=self.headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_text = e.response.text[:200] if e.response.text else "No response body"
            logger.error(f"Storage delete failed for {keys}: {e.response.status_code} - {error_text}")
            raise StorageError(f"Delete rejected with status {e.response.status_code}", e.response.status_code)
        except httpx.HTTPError as e:
            logger.error(f"Storage delete failed for {keys}: {e}")
            raise StorageError(f"Delete failed: {e}")

        logger.info(f"Removed objects {keys}")


def create_http_client(config: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.storage_timeout)
