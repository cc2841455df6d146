"""
FastAPI dependency injection utilities for services, the session user and CSRF checks.
"""

from functools import lru_cache
from typing import Optional
import secrets
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from realty.config import settings
from realty.database import get_db
from realty.models.user import User
from realty.services.auth import AuthService
from realty.services.listing import ListingService
from realty.services.inquiry import InquiryService
from realty.services.mailer import Mailer
from realty.utils.file_utils import ImageStorage
from realty.utils.exceptions import LoginRequiredError, CSRFError

SAFE_METHODS = ("GET", "HEAD", "OPTIONS", "TRACE")

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


@lru_cache()
def get_image_storage() -> ImageStorage:
    return ImageStorage()


@lru_cache()
def get_mailer() -> Mailer:
    return Mailer()


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    storage: ImageStorage = Depends(get_image_storage)
) -> ListingService:
    return ListingService(db, storage)


async def get_inquiry_service(db: AsyncSession = Depends(get_db)) -> InquiryService:
    return InquiryService(db)


async def get_optional_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[User]:
    """
    Get the user behind the session cookie, or None.

    The user is also stored on request.state for the templates.
    """
    token = request.cookies.get(settings.session_cookie_name)
    user = await auth_service.get_user_from_session(token)
    request.state.user = user
    return user


async def get_current_user(
    current_user: Optional[User] = Depends(get_optional_current_user)
) -> User:
    """
    Get the signed-in user for protected routes.

    Raises:
        LoginRequiredError: If there is no valid session
    """
    if current_user is None:
        raise LoginRequiredError()
    return current_user


async def verify_csrf(request: Request) -> None:
    """
    Double-submit check for unsafe methods: the token sent in the CSRF header
    or form field must equal the CSRF cookie.

    Raises:
        CSRFError: If the token is missing or doesn't match
    """
    if request.method in SAFE_METHODS:
        return

    expected = request.cookies.get(settings.csrf_cookie_name)
    submitted = request.headers.get(settings.csrf_header_name)

    if not submitted and request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        submitted = form.get(settings.csrf_form_field)

    if not expected or not isinstance(submitted, str) or not secrets.compare_digest(expected, submitted):
        raise CSRFError()
