"""
Listing, inquiry and search schemas.
Form schemas parse HTML posts; view schemas shape what the pages and the JSON feed receive.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
import uuid

from realty.models.listing import Listing
from realty.schemas.forms import FormSchema


class ListingForm(FormSchema):
    """Fields an owner fills in when creating or editing a listing."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=200)
    category_id: uuid.UUID
    price_tier_id: uuid.UUID
    bedrooms: int = Field(..., ge=0, le=50)
    parking: int = Field(..., ge=0, le=50)
    bathrooms: int = Field(..., ge=0, le=50)
    street: str = Field(..., min_length=1, max_length=255)
    latitude: Decimal = Field(..., ge=-90, le=90)
    longitude: Decimal = Field(..., ge=-180, le=180)

    error_messages = {
        "title": "Listing title is required (100 characters at most)",
        "description": "Description is required (200 characters at most)",
        "category_id": "Select a category",
        "price_tier_id": "Select a price range",
        "bedrooms": "Select the number of bedrooms",
        "parking": "Select the number of parking spaces",
        "bathrooms": "Select the number of bathrooms",
        "street": "Place the listing on the map",
        "latitude": "Place the listing on the map",
        "longitude": "Place the listing on the map",
    }

    @classmethod
    def initial_data(cls, listing: Listing) -> Dict[str, Any]:
        """Form values for editing an existing listing."""
        return {name: str(getattr(listing, name)) for name in cls.model_fields}


class MessageForm(FormSchema):
    body: str = Field(..., min_length=1)

    error_messages = {"body": "Message cannot be empty"}


class SearchForm(FormSchema):
    term: str = Field(..., min_length=1, max_length=100)


class SenderSummary(BaseModel):
    """Public identity of a message sender."""

    id: uuid.UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class InquiryMessageView(BaseModel):
    id: uuid.UUID
    body: str
    created_at: datetime
    sender: SenderSummary

    model_config = ConfigDict(from_attributes=True)


class ReferenceItem(BaseModel):
    id: uuid.UUID
    name: str


class ListingFeedItem(BaseModel):
    """Published listing as served to the map widget."""

    id: uuid.UUID
    title: str
    image: str
    bedrooms: int
    parking: int
    bathrooms: int
    street: str
    latitude: float
    longitude: float
    price_tier: Optional[ReferenceItem] = None
    category: Optional[ReferenceItem] = None


class PublishStatusUpdate(BaseModel):
    published: Optional[bool] = None


@dataclass
class ListingView:
    """A published listing as seen by one viewer."""

    listing: Listing
    is_owner: bool
    can_message: bool


@dataclass
class OwnedListingsPage:
    listings: List[Listing]
    total: int
    pages: int
    page: int
    offset: int
    limit: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.pages
