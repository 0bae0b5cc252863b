"""
API route handlers for the Classifieds Listing API.
"""

from .auth import router as auth_router
from .listings import router as listings_router
from .upload import router as upload_router

__all__ = ["auth_router", "listings_router", "upload_router"]
