"""
Listing repository for owner-scoped and public listing queries.
Also serves the category and price tier reference tables.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from realty.repositories.base import BaseRepository
from realty.models.listing import Listing, Category, PriceTier
from typing import Optional, List, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listing persistence.
    Owner pages load categories, price tiers and message counts in one round trip each.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    async def create_listing(self, listing_data: Dict[str, Any]) -> Listing:
        """
        Create a new listing as an imageless, unpublished draft.

        Args:
            listing_data: Listing columns including owner_id

        Returns:
            Created listing instance
        """
        create_data = {**listing_data, "image": "", "published": False}
        created = await self.create(create_data)
        logger.info(f"Created listing: {created.title} (ID: {created.id})")
        return created

    async def get_owned_page(
        self,
        owner_id: uuid.UUID,
        skip: int = 0,
        limit: int = 4
    ) -> Tuple[List[Listing], int]:
        """
        Get a page of listings belonging to one owner.

        Returns:
            Tuple of (listings with messages loaded, total count)
        """
        try:
            query = (
                select(Listing)
                .options(selectinload(Listing.messages))
                .where(Listing.owner_id == owner_id)
                .order_by(Listing.created_at.desc(), Listing.id)
                .offset(skip)
                .limit(limit)
            )
            count_query = select(func.count(Listing.id)).where(Listing.owner_id == owner_id)

            result = await self.db.execute(query)
            listings = list(result.scalars().all())

            count_result = await self.db.execute(count_query)
            total = count_result.scalar()

            logger.debug(f"Retrieved {len(listings)} of {total} listings for owner {owner_id}")
            return listings, total
        except Exception as e:
            logger.error(f"Failed to get listings for owner {owner_id}: {e}")
            raise

    async def get_published(
        self,
        limit: Optional[int] = None,
        category_id: Optional[uuid.UUID] = None,
        title_term: Optional[str] = None
    ) -> List[Listing]:
        """
        Get published listings, newest first.

        Args:
            limit: Maximum number of listings
            category_id: Restrict to one category
            title_term: Case-insensitive substring of the title
        """
        query = select(Listing).where(Listing.published.is_(True))

        if category_id is not None:
            query = query.where(Listing.category_id == category_id)

        if title_term:
            query = query.where(Listing.title.ilike(f"%{title_term}%"))

        query = query.order_by(Listing.created_at.desc())

        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_categories(self) -> List[Category]:
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get_price_tiers(self) -> List[PriceTier]:
        result = await self.db.execute(select(PriceTier).order_by(PriceTier.created_at, PriceTier.name))
        return list(result.scalars().all())

    async def get_category(self, category_id: uuid.UUID) -> Optional[Category]:
        return await self.db.get(Category, category_id)

    async def get_price_tier(self, price_tier_id: uuid.UUID) -> Optional[PriceTier]:
        return await self.db.get(PriceTier, price_tier_id)
