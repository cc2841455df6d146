"""
Test configuration and fixtures for the Realty Portal.
Provides an in-memory database per test, test data factories and an HTTP client.
"""

import os
import io
import tempfile

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="realty-uploads-"))

import pytest
import uuid
from decimal import Decimal
from typing import AsyncGenerator, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from httpx import AsyncClient, ASGITransport
from fastapi import UploadFile
from PIL import Image

from realty.main import app
from realty.database import Database
from realty.models.user import User
from realty.models.listing import Listing, Category, PriceTier
from realty.repositories.user import UserRepository
from realty.repositories.listing import ListingRepository
from realty.repositories.message import MessageRepository
from realty.services.auth import AuthService
from realty.services.listing import ListingService
from realty.services.inquiry import InquiryService
from realty.services.mailer import Mailer
from realty.utils.auth import create_session_token
from realty.utils.dependencies import get_image_storage, get_mailer
from realty.utils.file_utils import ImageStorage

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

CSRF_TOKEN = "test-csrf-token"

DEFAULT_PASSWORD = "123456"


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory store for each test."""
    db = Database(TEST_DATABASE_URL)
    db.connect()
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
def image_storage(tmp_path) -> ImageStorage:
    return ImageStorage(upload_dir=str(tmp_path / "uploads"))


class RecordingMailer(Mailer):
    """Mailer that keeps messages instead of sending them."""

    def __init__(self):
        super().__init__()
        self.sent: List[Tuple[str, str, str]] = []

    def send(self, to_email: str, subject: str, body: str) -> bool:
        self.sent.append((to_email, subject, body))
        return True


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
async def client(
    database: Database,
    image_storage: ImageStorage,
    mailer: RecordingMailer
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test store, holding a CSRF cookie."""
    app.state.database = database
    app.dependency_overrides[get_image_storage] = lambda: image_storage
    app.dependency_overrides[get_mailer] = lambda: mailer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        ac.cookies.set("_csrf", CSRF_TOKEN)
        yield ac

    app.dependency_overrides.clear()
    app.state.database = None


def sign_in(client: AsyncClient, user: User) -> None:
    """Give the client a valid session cookie for the user."""
    client.cookies.set("_token", create_session_token(user.id, user.name))


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def listing_repository(db_session: AsyncSession) -> ListingRepository:
    return ListingRepository(db_session)


@pytest.fixture
def message_repository(db_session: AsyncSession) -> MessageRepository:
    return MessageRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession, image_storage: ImageStorage) -> ListingService:
    return ListingService(db_session, image_storage)


@pytest.fixture
def inquiry_service(db_session: AsyncSession) -> InquiryService:
    return InquiryService(db_session)


# Test data factories
def make_image_bytes(image_format: str = "PNG", size: Tuple[int, int] = (8, 8)) -> bytes:
    """Small valid image generated with Pillow."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


def make_upload(filename: str = "house.png", content: bytes = None) -> UploadFile:
    return UploadFile(file=io.BytesIO(content if content is not None else make_image_bytes()), filename=filename)


class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        confirmed: bool = True
    ) -> dict:
        return {
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "confirmed": confirmed
        }

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = None,
        password: str = DEFAULT_PASSWORD,
        name: str = "Test User",
        confirmed: bool = True,
        token: str = None
    ) -> User:
        user_data = UserFactory.create_user_data(email=email, password=password, name=name, confirmed=confirmed)
        if token:
            user_data["token"] = token
        return await user_repo.create_user(user_data)


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_form_data(category: Category, price_tier: PriceTier, **overrides) -> dict:
        """Submitted listing form fields, as strings."""
        data = {
            "title": "Family house near the park",
            "description": "Three bedroom house with garden",
            "category_id": str(category.id),
            "price_tier_id": str(price_tier.id),
            "bedrooms": "3",
            "parking": "1",
            "bathrooms": "2",
            "street": "Main Street 123",
            "latitude": "20.67444163",
            "longitude": "-103.38797551",
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_listing(
        listing_repo: ListingRepository,
        owner: User,
        category: Category,
        price_tier: PriceTier,
        title: str = "Family house near the park",
        published: bool = False,
        image: str = ""
    ) -> Listing:
        listing = await listing_repo.create_listing({
            "title": title,
            "description": "Three bedroom house with garden",
            "bedrooms": 3,
            "parking": 1,
            "bathrooms": 2,
            "street": "Main Street 123",
            "latitude": Decimal("20.67444163"),
            "longitude": Decimal("-103.38797551"),
            "owner_id": owner.id,
            "category_id": category.id,
            "price_tier_id": price_tier.id,
        })
        if published or image:
            listing.published = published
            listing.image = image
            listing = await listing_repo.save(listing)
        return listing


# Test data fixtures
@pytest.fixture
async def category(db_session: AsyncSession) -> Category:
    category = Category(name="House")
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category


@pytest.fixture
async def other_category(db_session: AsyncSession) -> Category:
    category = Category(name="Apartment")
    db_session.add(category)
    await db_session.commit()
    await db_session.refresh(category)
    return category


@pytest.fixture
async def price_tier(db_session: AsyncSession) -> PriceTier:
    tier = PriceTier(name="$50,000 - $75,000 USD")
    db_session.add(tier)
    await db_session.commit()
    await db_session.refresh(tier)
    return tier


@pytest.fixture
async def owner(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="owner@example.com", name="Owner")


@pytest.fixture
async def buyer(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="buyer@example.com", name="Buyer")


@pytest.fixture
async def draft_listing(
    listing_repository: ListingRepository,
    owner: User,
    category: Category,
    price_tier: PriceTier
) -> Listing:
    return await ListingFactory.create_listing(listing_repository, owner, category, price_tier)


@pytest.fixture
async def published_listing(
    listing_repository: ListingRepository,
    image_storage: ImageStorage,
    owner: User,
    category: Category,
    price_tier: PriceTier
) -> Listing:
    """Published listing whose image exists in the test upload directory."""
    filename = "published.png"
    image_storage.path_for(filename).write_bytes(make_image_bytes())
    return await ListingFactory.create_listing(
        listing_repository, owner, category, price_tier,
        title="Published apartment downtown", published=True, image=filename
    )
