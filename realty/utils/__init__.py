"""
Utility modules for the Realty Portal.
"""

from .auth import (
    create_session_token,
    verify_session_token,
    generate_account_token,
    SessionPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    InternalServerError,
    AuthenticationError,
    InvalidTokenError,
    LoginRequiredError,
    CSRFError,
    ListingNotFoundError,
    ListingOwnershipError,
    ListingAlreadyPublishedError,
    FileUploadError,
    ImageRemovalError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_session_token",
    "verify_session_token",
    "generate_account_token",
    "SessionPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "InternalServerError",
    "AuthenticationError",
    "InvalidTokenError",
    "LoginRequiredError",
    "CSRFError",
    "ListingNotFoundError",
    "ListingOwnershipError",
    "ListingAlreadyPublishedError",
    "FileUploadError",
    "ImageRemovalError",
]
