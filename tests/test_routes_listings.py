"""
Integration tests for the owner's listing pages.
"""

import pytest
import uuid
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from realty.models.user import User
from realty.models.listing import Listing, Category, PriceTier
from realty.repositories.listing import ListingRepository
from realty.repositories.message import MessageRepository
from realty.utils.file_utils import ImageStorage
from tests.conftest import CSRF_TOKEN, ListingFactory, make_image_bytes, sign_in


class TestOwnerIndex:
    """Test GET /my-listings."""

    async def test_requires_sign_in(self, client: AsyncClient):
        response = await client.get("/my-listings")

        assert response.status_code == 303
        assert response.headers["location"] == "/auth/login"

    async def test_json_client_gets_401(self, client: AsyncClient):
        response = await client.get("/my-listings", headers={"Accept": "application/json"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.parametrize("page", ["0", "-1", "abc"])
    async def test_invalid_page_redirects_to_first_page(self, client: AsyncClient, owner: User, page):
        sign_in(client, owner)

        response = await client.get(f"/my-listings?page={page}")

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings?page=1"

    async def test_lists_only_own_listings(
        self,
        client: AsyncClient,
        listing_repository: ListingRepository,
        owner: User,
        buyer: User,
        category: Category,
        price_tier: PriceTier
    ):
        await ListingFactory.create_listing(listing_repository, owner, category, price_tier, title="Owner house")
        await ListingFactory.create_listing(listing_repository, buyer, category, price_tier, title="Buyer house")
        sign_in(client, owner)

        response = await client.get("/my-listings?page=1")

        assert response.status_code == 200
        assert "Owner house" in response.text
        assert "Buyer house" not in response.text


class TestCreateListing:
    """Test the draft creation form."""

    async def test_form_renders(self, client: AsyncClient, owner: User, category: Category):
        sign_in(client, owner)

        response = await client.get("/listings/create")

        assert response.status_code == 200
        assert category.name in response.text

    async def test_post_without_csrf_token_is_forbidden(
        self, client: AsyncClient, owner: User, category: Category, price_tier: PriceTier
    ):
        sign_in(client, owner)

        response = await client.post("/listings/create", data=ListingFactory.create_form_data(category, price_tier))

        assert response.status_code == 403

    async def test_creates_draft_and_continues_to_image_step(
        self,
        client: AsyncClient,
        listing_repository: ListingRepository,
        owner: User,
        category: Category,
        price_tier: PriceTier
    ):
        sign_in(client, owner)
        data = ListingFactory.create_form_data(category, price_tier, _csrf=CSRF_TOKEN)

        response = await client.post("/listings/create", data=data)

        assert response.status_code == 303
        location = response.headers["location"]
        assert location.startswith("/listings/") and location.endswith("/image")

        listing = await listing_repository.get_by_id(uuid.UUID(location.split("/")[2]))
        assert listing.owner_id == owner.id
        assert listing.published is False
        assert listing.image == ""

    async def test_invalid_form_rerenders_with_submitted_values(
        self, client: AsyncClient, owner: User, category: Category, price_tier: PriceTier
    ):
        sign_in(client, owner)
        data = ListingFactory.create_form_data(category, price_tier, title="", _csrf=CSRF_TOKEN)

        response = await client.post("/listings/create", data=data)

        assert response.status_code == 200
        assert "Main Street 123" in response.text

    async def test_unknown_category_is_a_field_error(
        self, client: AsyncClient, owner: User, category: Category, price_tier: PriceTier
    ):
        sign_in(client, owner)
        data = ListingFactory.create_form_data(
            category, price_tier, category_id=str(uuid.uuid4()), _csrf=CSRF_TOKEN
        )

        response = await client.post("/listings/create", data=data)

        assert response.status_code == 200
        assert "Select a category" in response.text


class TestImageStep:
    """Test the image upload that publishes a draft."""

    async def test_upload_publishes_listing(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        image_storage: ImageStorage,
        owner: User,
        draft_listing: Listing
    ):
        sign_in(client, owner)

        response = await client.post(
            f"/listings/{draft_listing.id}/image",
            data={"_csrf": CSRF_TOKEN},
            files={"image": ("house.png", make_image_bytes(), "image/png")},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"

        await db_session.refresh(draft_listing)
        assert draft_listing.published is True
        assert draft_listing.image.endswith(".png")
        assert image_storage.exists(draft_listing.image)

    async def test_missing_image_rerenders_form(self, client: AsyncClient, owner: User, draft_listing: Listing):
        sign_in(client, owner)

        response = await client.post(f"/listings/{draft_listing.id}/image", data={"_csrf": CSRF_TOKEN})

        assert response.status_code == 200
        assert "An image is required" in response.text

    async def test_published_listing_cannot_reenter_image_step(
        self, client: AsyncClient, owner: User, published_listing: Listing
    ):
        sign_in(client, owner)

        response = await client.get(f"/listings/{published_listing.id}/image")

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"

    async def test_non_owner_is_sent_back(self, client: AsyncClient, buyer: User, draft_listing: Listing):
        sign_in(client, buyer)

        response = await client.get(f"/listings/{draft_listing.id}/image")

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"


class TestEditListing:
    """Test editing an owned listing."""

    async def test_form_is_prefilled(self, client: AsyncClient, owner: User, draft_listing: Listing):
        sign_in(client, owner)

        response = await client.get(f"/listings/{draft_listing.id}/edit")

        assert response.status_code == 200
        assert draft_listing.title in response.text

    async def test_owner_saves_changes(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        owner: User,
        draft_listing: Listing,
        category: Category,
        price_tier: PriceTier
    ):
        sign_in(client, owner)
        data = ListingFactory.create_form_data(category, price_tier, title="Renovated house", _csrf=CSRF_TOKEN)

        response = await client.post(f"/listings/{draft_listing.id}/edit", data=data)

        assert response.status_code == 303
        await db_session.refresh(draft_listing)
        assert draft_listing.title == "Renovated house"

    async def test_non_owner_changes_nothing(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        buyer: User,
        draft_listing: Listing,
        category: Category,
        price_tier: PriceTier
    ):
        sign_in(client, buyer)
        data = ListingFactory.create_form_data(category, price_tier, title="Hijacked", _csrf=CSRF_TOKEN)

        response = await client.post(f"/listings/{draft_listing.id}/edit", data=data)

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"
        await db_session.refresh(draft_listing)
        assert draft_listing.title == "Family house near the park"

    async def test_missing_listing(self, client: AsyncClient, owner: User):
        sign_in(client, owner)

        response = await client.get(f"/listings/{uuid.uuid4()}/edit")

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"


class TestDeleteListing:
    """Test deleting a listing."""

    async def test_owner_deletes_listing_and_image(
        self,
        client: AsyncClient,
        listing_repository: ListingRepository,
        image_storage: ImageStorage,
        owner: User,
        published_listing: Listing
    ):
        sign_in(client, owner)

        response = await client.post(f"/listings/{published_listing.id}/delete", data={"_csrf": CSRF_TOKEN})

        assert response.status_code == 303
        assert not await listing_repository.exists(published_listing.id)
        assert not image_storage.exists("published.png")

    async def test_non_owner_cannot_delete(
        self,
        client: AsyncClient,
        listing_repository: ListingRepository,
        buyer: User,
        published_listing: Listing
    ):
        sign_in(client, buyer)

        response = await client.post(f"/listings/{published_listing.id}/delete", data={"_csrf": CSRF_TOKEN})

        assert response.status_code == 303
        assert await listing_repository.exists(published_listing.id)


class TestPublishStatus:
    """Test PUT /listings/{id}/status."""

    async def test_toggle_without_body(
        self, client: AsyncClient, db_session: AsyncSession, owner: User, published_listing: Listing
    ):
        sign_in(client, owner)

        response = await client.put(
            f"/listings/{published_listing.id}/status", headers={"CSRF-Token": CSRF_TOKEN}
        )

        assert response.status_code == 200
        assert response.json() == {"result": True}
        await db_session.refresh(published_listing)
        assert published_listing.published is False

    async def test_explicit_state(
        self, client: AsyncClient, db_session: AsyncSession, owner: User, published_listing: Listing
    ):
        sign_in(client, owner)

        response = await client.put(
            f"/listings/{published_listing.id}/status",
            json={"published": True},
            headers={"CSRF-Token": CSRF_TOKEN},
        )

        assert response.json() == {"result": True}
        await db_session.refresh(published_listing)
        assert published_listing.published is True

    async def test_refused_change_redirects_and_script_checks_response(
        self, client: AsyncClient, db_session: AsyncSession, buyer: User, published_listing: Listing
    ):
        sign_in(client, buyer)

        response = await client.put(
            f"/listings/{published_listing.id}/status",
            headers={"CSRF-Token": CSRF_TOKEN, "Accept": "application/json"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"
        await db_session.refresh(published_listing)
        assert published_listing.published is True

        script = await client.get("/static/status.js")
        assert script.status_code == 200
        assert "response.ok" in script.text
        assert "application/json" in script.text

    async def test_wrong_csrf_header(self, client: AsyncClient, owner: User, published_listing: Listing):
        sign_in(client, owner)

        response = await client.put(
            f"/listings/{published_listing.id}/status", headers={"CSRF-Token": "forged"}
        )

        assert response.status_code == 403


class TestListingMessages:
    """Test the owner's inquiry mailbox page."""

    async def test_owner_sees_messages(
        self,
        client: AsyncClient,
        message_repository: MessageRepository,
        owner: User,
        buyer: User,
        published_listing: Listing
    ):
        await message_repository.create_message(published_listing.id, buyer.id, "Is the price negotiable?")
        sign_in(client, owner)

        response = await client.get(f"/listings/{published_listing.id}/messages")

        assert response.status_code == 200
        assert "Is the price negotiable?" in response.text
        assert "buyer@example.com" in response.text

    async def test_non_owner_is_sent_back(self, client: AsyncClient, buyer: User, published_listing: Listing):
        sign_in(client, buyer)

        response = await client.get(f"/listings/{published_listing.id}/messages")

        assert response.status_code == 303
        assert response.headers["location"] == "/my-listings"
