"""
Tests for the inquiry mailbox.
"""

import pytest
import uuid

from realty.models.user import User
from realty.models.listing import Listing
from realty.schemas.listing import MessageForm, SenderSummary
from realty.services.inquiry import InquiryService
from realty.utils.exceptions import ListingNotFoundError, ListingOwnershipError


class TestInquiryService:
    """Test InquiryService functionality."""

    async def test_post_message(self, inquiry_service: InquiryService, buyer: User, published_listing: Listing):
        message = await inquiry_service.post_message(
            published_listing.id, buyer, MessageForm(body="Can I visit on Saturday?")
        )

        assert message.listing_id == published_listing.id
        assert message.sender_id == buyer.id
        assert message.body == "Can I visit on Saturday?"

    async def test_post_to_missing_listing(self, inquiry_service: InquiryService, buyer: User):
        with pytest.raises(ListingNotFoundError):
            await inquiry_service.post_message(uuid.uuid4(), buyer, MessageForm(body="Hello"))

    async def test_owner_reads_messages_with_sender_summaries(
        self, inquiry_service: InquiryService, owner: User, buyer: User, published_listing: Listing
    ):
        await inquiry_service.post_message(published_listing.id, buyer, MessageForm(body="First"))
        await inquiry_service.post_message(published_listing.id, buyer, MessageForm(body="Second"))

        listing, messages = await inquiry_service.list_for_listing(published_listing.id, owner)

        assert listing.id == published_listing.id
        assert [m.body for m in messages] == ["First", "Second"]
        sender = messages[0].sender
        assert isinstance(sender, SenderSummary)
        assert sender.model_dump() == {"id": buyer.id, "name": "Buyer", "email": "buyer@example.com"}
        assert "hashed_password" not in messages[0].model_dump()["sender"]

    async def test_non_owner_is_refused(
        self, inquiry_service: InquiryService, buyer: User, published_listing: Listing
    ):
        await inquiry_service.post_message(published_listing.id, buyer, MessageForm(body="Hello"))

        with pytest.raises(ListingOwnershipError):
            await inquiry_service.list_for_listing(published_listing.id, buyer)

    async def test_list_for_missing_listing(self, inquiry_service: InquiryService, owner: User):
        with pytest.raises(ListingNotFoundError):
            await inquiry_service.list_for_listing(uuid.uuid4(), owner)

    async def test_empty_mailbox(self, inquiry_service: InquiryService, owner: User, draft_listing: Listing):
        _, messages = await inquiry_service.list_for_listing(draft_listing.id, owner)

        assert messages == []
