"""
Service layer for business logic.
"""

from realty.services.auth import AuthService
from realty.services.listing import ListingService
from realty.services.inquiry import InquiryService
from realty.services.mailer import Mailer
from realty.services.error_handler import ErrorHandlerService

__all__ = ["AuthService", "ListingService", "InquiryService", "Mailer", "ErrorHandlerService"]
