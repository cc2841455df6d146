"""
Inquiry message repository.
Append-only: exposes creation and reads, never updates.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from realty.repositories.base import BaseRepository
from realty.models.message import InquiryMessage
from realty.models.user import User
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository[InquiryMessage]):
    """Repository for inquiry messages."""

    def __init__(self, db: AsyncSession):
        super().__init__(InquiryMessage, db)

    async def create_message(self, listing_id: uuid.UUID, sender_id: uuid.UUID, body: str) -> InquiryMessage:
        message = await self.create({
            "listing_id": listing_id,
            "sender_id": sender_id,
            "body": body,
        })
        logger.info(f"Stored inquiry {message.id} for listing {listing_id}")
        return message

    async def get_for_listing(self, listing_id: uuid.UUID) -> List[InquiryMessage]:
        """
        Get every message for a listing with its sender.

        Only the sender's id, name and email columns are loaded; the password
        hash never leaves the database.
        """
        query = (
            select(InquiryMessage)
            .options(
                selectinload(InquiryMessage.sender).load_only(User.id, User.name, User.email, raiseload=True)
            )
            .where(InquiryMessage.listing_id == listing_id)
            .order_by(InquiryMessage.created_at.asc())
        )
        result = await self.db.execute(query)
        messages = list(result.scalars().all())
        logger.debug(f"Retrieved {len(messages)} messages for listing {listing_id}")
        return messages
