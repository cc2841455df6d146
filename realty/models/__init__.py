"""
Database models for the Realty Portal.
Includes User, Listing with its reference tables, and InquiryMessage.
"""

from realty.models.user import User
from realty.models.listing import Listing, Category, PriceTier
from realty.models.message import InquiryMessage

__all__ = [
    "User",
    "Listing",
    "Category",
    "PriceTier",
    "InquiryMessage",
]
