"""
Inquiry service: buyers post messages about a listing, owners read them.
"""

from typing import List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from realty.repositories.listing import ListingRepository
from realty.repositories.message import MessageRepository
from realty.models.listing import Listing
from realty.models.message import InquiryMessage
from realty.models.user import User
from realty.schemas.listing import MessageForm, InquiryMessageView
from realty.utils.exceptions import ListingNotFoundError, ListingOwnershipError
import uuid
import logging

logger = logging.getLogger(__name__)


class InquiryService:
    """Append-only mailbox attached to each listing."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.message_repo = MessageRepository(db_session)

    async def post_message(self, listing_id: uuid.UUID, sender: User, form: MessageForm) -> InquiryMessage:
        """
        Append a message to a listing's mailbox. Anyone signed in may post.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
        """
        if not await self.listing_repo.exists(listing_id):
            raise ListingNotFoundError(str(listing_id))

        message = await self.message_repo.create_message(listing_id, sender.id, form.body)
        logger.info(f"User {sender.id} sent inquiry {message.id} about listing {listing_id}")
        return message

    async def list_for_listing(
        self,
        listing_id: uuid.UUID,
        current_user: User
    ) -> Tuple[Listing, List[InquiryMessageView]]:
        """
        Get every message about a listing the current user owns.

        Senders are returned as id, name and email only.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            ListingOwnershipError: If the user doesn't own the listing
        """
        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise ListingNotFoundError(str(listing_id))

        if not current_user.owns(listing.owner_id):
            logger.warning(f"User {current_user.id} refused the mailbox of listing {listing_id}")
            raise ListingOwnershipError()

        messages = await self.message_repo.get_for_listing(listing_id)
        return listing, [InquiryMessageView.model_validate(message) for message in messages]
