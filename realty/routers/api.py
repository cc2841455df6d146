"""
JSON feed of published listings for the map widget.
"""

from typing import List
from fastapi import APIRouter, Depends, status

from realty.schemas.listing import ListingFeedItem
from realty.services.listing import ListingService
from realty.utils.dependencies import get_listing_service

router = APIRouter(prefix="/api", tags=["API"])


@router.get(
    "/listings",
    response_model=List[ListingFeedItem],
    status_code=status.HTTP_200_OK,
    summary="Published listings",
    description="Every published listing with its category and price range"
)
async def published_listings(
    listing_service: ListingService = Depends(get_listing_service)
) -> List[ListingFeedItem]:
    listings = await listing_service.list_published_for_map()
    return [ListingFeedItem.model_validate(listing.to_dict()) for listing in listings]
