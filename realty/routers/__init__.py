"""
Route handlers for the Realty Portal.
"""

from .auth import router as auth_router
from .listings import router as listings_router
from .public import router as public_router
from .api import router as api_router

__all__ = ["auth_router", "listings_router", "public_router", "api_router"]
