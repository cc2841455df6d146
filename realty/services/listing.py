"""
Listing service for the owner-scoped listing lifecycle.
Handles draft creation, the one-time image step, editing, publish toggling,
deletion and the public read paths.
"""

from typing import Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import UploadFile
from realty.repositories.listing import ListingRepository
from realty.models.listing import Listing, Category, PriceTier
from realty.models.user import User
from realty.schemas.listing import ListingForm, ListingView, OwnedListingsPage
from realty.utils.file_utils import ImageStorage
from realty.utils.pagination import page_offset, page_count
from realty.utils.exceptions import (
    ValidationError,
    NotFoundError,
    FileUploadError,
    ImageRemovalError,
    ListingNotFoundError,
    ListingOwnershipError,
    ListingAlreadyPublishedError,
)
from realty.config import settings
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingService:
    """
    Listing lifecycle: creation -> draft -> image upload -> publish ->
    edit / toggle publish -> deletion.

    Every mutating operation requires the acting user to own the listing.
    Refusals raise ListingNotFoundError or ListingOwnershipError and leave
    the listing untouched.
    """

    def __init__(self, db_session: AsyncSession, storage: ImageStorage):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.storage = storage

    async def create_listing(self, form: ListingForm, current_user: User) -> Listing:
        """
        Create an unpublished, imageless draft owned by the current user.

        Raises:
            ValidationError: If the category or price tier does not exist
        """
        await self._validate_references(form)

        create_data = form.model_dump()
        create_data["owner_id"] = current_user.id

        listing = await self.listing_repo.create_listing(create_data)
        logger.info(f"Listing {listing.id} drafted by {current_user.email}")
        return listing

    async def get_listing_for_image(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """
        Guard for the image upload step.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            ListingAlreadyPublishedError: If the image step already ran
            ListingOwnershipError: If the user doesn't own the listing
        """
        listing = await self._get_listing(listing_id)

        if listing.published:
            logger.warning(f"Image step refused for published listing {listing_id}")
            raise ListingAlreadyPublishedError()

        self._check_owner(listing, current_user)
        return listing

    async def attach_image(self, listing_id: uuid.UUID, current_user: User, upload: Optional[UploadFile]) -> Listing:
        """
        Store the listing image and publish the listing.

        Refused once the listing is published. A listing that was unpublished
        again can take a new image, which replaces the stored file.

        Raises:
            ListingNotFoundError, ListingAlreadyPublishedError, ListingOwnershipError: Guard failures
            FileUploadError: If the upload is missing or not a valid image
        """
        listing = await self.get_listing_for_image(listing_id, current_user)

        if upload is None or not upload.filename:
            raise FileUploadError("An image is required")

        filename = await self.storage.save(upload)

        previous = listing.image
        listing.image = filename
        listing.published = True
        try:
            listing = await self.listing_repo.save(listing)
        except Exception:
            logger.error(f"Failed to publish listing {listing_id}, discarding image {filename}")
            self.storage.remove(filename)
            raise

        if previous and previous != filename:
            try:
                self.storage.remove(previous)
            except OSError as e:
                logger.error(f"Replaced image {previous} of listing {listing_id} could not be removed: {e}")

        logger.info(f"Listing {listing_id} published with image {filename}")
        return listing

    async def get_owned_listing(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """
        Get a listing the current user owns.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            ListingOwnershipError: If the user doesn't own the listing
        """
        listing = await self._get_listing(listing_id)
        self._check_owner(listing, current_user)
        return listing

    async def update_listing(self, listing_id: uuid.UUID, form: ListingForm, current_user: User) -> Listing:
        """
        Overwrite the editable fields of an owned listing.
        The image and the publish state are never touched here.
        """
        listing = await self.get_owned_listing(listing_id, current_user)
        await self._validate_references(form)

        for field, value in form.model_dump().items():
            setattr(listing, field, value)

        listing = await self.listing_repo.save(listing)
        logger.info(f"Listing {listing_id} updated by {current_user.email}")
        return listing

    async def set_published(self, listing_id: uuid.UUID, current_user: User, published: bool) -> Listing:
        """
        Write the publish flag of an owned listing.

        The flag is written as given, even for a listing without an image.
        """
        listing = await self.get_owned_listing(listing_id, current_user)

        if published and not listing.has_image:
            logger.warning(f"Listing {listing_id} published without an image")

        listing.published = published
        listing = await self.listing_repo.save(listing)
        logger.info(f"Listing {listing_id} publish state set to {published}")
        return listing

    async def toggle_published(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        listing = await self.get_owned_listing(listing_id, current_user)
        return await self.set_published(listing_id, current_user, not listing.published)

    async def delete_listing(self, listing_id: uuid.UUID, current_user: User) -> None:
        """
        Delete an owned listing: the image file first, then the record.

        Raises:
            ImageRemovalError: If the image file could not be removed; the record is kept
            Exception: If the record could not be deleted after its image was removed
        """
        listing = await self.get_owned_listing(listing_id, current_user)

        if listing.image:
            try:
                self.storage.remove(listing.image)
            except OSError as e:
                logger.error(f"Could not remove image {listing.image} of listing {listing_id}: {e}")
                raise ImageRemovalError(listing.image, str(e))

        try:
            await self.listing_repo.delete(listing_id)
        except Exception as e:
            logger.error(
                f"Listing {listing_id} left without its image {listing.image!r}: record deletion failed: {e}"
            )
            raise

        logger.info(f"Listing {listing_id} deleted by {current_user.email}")

    async def view_listing(
        self,
        listing_id: uuid.UUID,
        viewer: Optional[User],
        include_unpublished: bool = False
    ) -> ListingView:
        """
        Public view of a listing. Drafts and unpublished listings are not found,
        including for their owner, unless include_unpublished is set.
        """
        listing = await self._get_listing(listing_id)

        if not listing.published and not include_unpublished:
            raise ListingNotFoundError(str(listing_id))

        is_owner = viewer is not None and viewer.owns(listing.owner_id)
        return ListingView(listing=listing, is_owner=is_owner, can_message=not is_owner)

    async def list_owned(
        self,
        current_user: User,
        page: int,
        page_size: Optional[int] = None
    ) -> OwnedListingsPage:
        """
        Get one page of the current user's listings, newest first.

        Args:
            current_user: Owner
            page: 1-based page number
            page_size: Listings per page
        """
        limit = page_size or settings.owned_listings_page_size
        offset = page_offset(page, limit)

        listings, total = await self.listing_repo.get_owned_page(current_user.id, skip=offset, limit=limit)

        return OwnedListingsPage(
            listings=listings,
            total=total,
            pages=page_count(total, limit),
            page=page,
            offset=offset,
            limit=limit,
        )

    async def list_published(self, limit: Optional[int] = None) -> List[Listing]:
        return await self.listing_repo.get_published(limit=limit or settings.home_listings_limit)

    async def list_by_category(self, category_id: uuid.UUID) -> Tuple[Category, List[Listing]]:
        """
        Get a category and its published listings.

        Raises:
            NotFoundError: If the category doesn't exist
        """
        category = await self.listing_repo.get_category(category_id)
        if not category:
            raise NotFoundError("Category", str(category_id))

        listings = await self.listing_repo.get_published(category_id=category_id)
        return category, listings

    async def search_published(self, term: str) -> List[Listing]:
        """Published listings whose title contains the term, case-insensitively."""
        listings = await self.listing_repo.get_published(title_term=term)
        logger.debug(f"Search for {term!r} matched {len(listings)} listings")
        return listings

    async def list_categories(self) -> List[Category]:
        return await self.listing_repo.get_categories()

    async def list_price_tiers(self) -> List[PriceTier]:
        return await self.listing_repo.get_price_tiers()

    async def list_published_for_map(self) -> List[Listing]:
        return await self.listing_repo.get_published()

    async def _get_listing(self, listing_id: uuid.UUID) -> Listing:
        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise ListingNotFoundError(str(listing_id))
        return listing

    def _check_owner(self, listing: Listing, current_user: User) -> None:
        if not current_user.owns(listing.owner_id):
            logger.warning(f"User {current_user.id} refused access to listing {listing.id}")
            raise ListingOwnershipError()

    async def _validate_references(self, form: ListingForm) -> None:
        """Check that the referenced category and price tier exist."""
        field_errors = []

        if not await self.listing_repo.get_category(form.category_id):
            field_errors.append({"field": "category_id", "message": "Select a category"})

        if not await self.listing_repo.get_price_tier(form.price_tier_id):
            field_errors.append({"field": "price_tier_id", "message": "Select a price range"})

        if field_errors:
            raise ValidationError("Listing references unknown data", field_errors=field_errors)
