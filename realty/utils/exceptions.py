"""
Custom exception classes for the Realty Portal.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Validation error exception."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class UnauthorizedError(APIException):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED"
        )


class ForbiddenError(APIException):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN"
        )


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class InternalServerError(APIException):
    """Internal server error exception."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_SERVER_ERROR"
        )


# Authentication specific exceptions
class AuthenticationError(UnauthorizedError):
    """Base class for failed sign-in attempts."""


class UserNotFoundError(AuthenticationError):
    def __init__(self, detail: str = "User does not exist"):
        super().__init__(detail)


class AccountNotConfirmedError(AuthenticationError):
    def __init__(self, detail: str = "Your account has not been confirmed"):
        super().__init__(detail)


class IncorrectPasswordError(AuthenticationError):
    def __init__(self, detail: str = "Incorrect password"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Unknown or already consumed one-time token, or a bad session credential."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class LoginRequiredError(UnauthorizedError):
    """Raised by protected routes when no valid session cookie is present."""

    def __init__(self, detail: str = "Sign in to continue"):
        super().__init__(detail)


class CSRFError(ForbiddenError):
    def __init__(self, detail: str = "Invalid CSRF token"):
        super().__init__(detail)
        self.error_code = "CSRF_FAILED"


# Listing specific exceptions
class ListingNotFoundError(NotFoundError):
    """Listing not found exception."""

    def __init__(self, listing_id: str):
        super().__init__("Listing", listing_id)


class ListingOwnershipError(ForbiddenError):
    """Listing ownership violation exception."""

    def __init__(self, detail: str = "You don't own this listing"):
        super().__init__(detail)


class ListingAlreadyPublishedError(ForbiddenError):
    """The image step only runs once, while the listing is still a draft."""

    def __init__(self, detail: str = "Listing is already published"):
        super().__init__(detail)


# File upload exceptions
class FileUploadError(ValidationError):
    """File upload error exception."""

    def __init__(self, detail: str):
        super().__init__(
            f"File upload error: {detail}",
            field_errors=[{"field": "image", "message": detail}]
        )


class ImageRemovalError(InternalServerError):
    """The stored image could not be removed, so the listing was kept."""

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Failed to remove image '{filename}': {reason}")
        self.error_code = "IMAGE_REMOVAL_FAILED"
