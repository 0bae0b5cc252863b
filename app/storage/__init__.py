"""
Object storage integration.
"""

from .client import StorageClient, StorageError, create_http_client

__all__ = ["StorageClient", "StorageError", "create_http_client"]
