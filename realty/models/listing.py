"""
Listing model and its reference tables.
A listing starts as an imageless draft and becomes public once an image is attached.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, Index, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Uuid
from realty.database import Base
from decimal import Decimal
import uuid
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from realty.models.user import User
    from realty.models.message import InquiryMessage


class Category(Base):
    """Listing category (house, apartment, warehouse...). Reference data."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)

    def to_dict(self) -> dict:
        return {"id": str(self.id), "name": self.name}


class PriceTier(Base):
    """Price range label a listing is filed under. Reference data."""

    __tablename__ = "price_tiers"

    name: Mapped[str] = mapped_column(String(60), nullable=False, unique=True)

    def to_dict(self) -> dict:
        return {"id": str(self.id), "name": self.name}


class Listing(Base):
    """
    Property listing owned by a single user.
    Includes property details, location data and the publish state.
    """

    __tablename__ = "listings"

    title: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Listing description"
    )

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)

    parking: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Number of parking spaces"
    )

    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False)

    # Location information
    street: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Street address"
    )

    latitude: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=8),
        nullable=False
    )

    longitude: Mapped[Decimal] = mapped_column(
        Numeric(precision=11, scale=8),
        nullable=False
    )

    # Publish state
    image: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Stored image filename, empty until the upload step"
    )

    published: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Whether the listing is publicly visible"
    )

    # Ownership and references
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who created this listing"
    )

    price_tier_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("price_tiers.id"),
        nullable=False
    )

    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("categories.id"),
        nullable=False,
        index=True
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", lazy="raise")

    price_tier: Mapped[PriceTier] = relationship(PriceTier, lazy="selectin")

    category: Mapped[Category] = relationship(Category, lazy="selectin")

    messages: Mapped[List["InquiryMessage"]] = relationship(
        "InquiryMessage",
        back_populates="listing",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
        order_by="InquiryMessage.created_at.asc()"
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title[:30]}, published={self.published})>"

    @property
    def has_image(self) -> bool:
        return bool(self.image)

    def to_dict(self) -> dict:
        """
        Convert listing to dictionary for the public map feed.
        """
        return {
            "id": str(self.id),
            "title": self.title,
            "image": self.image,
            "bedrooms": self.bedrooms,
            "parking": self.parking,
            "bathrooms": self.bathrooms,
            "street": self.street,
            "latitude": float(self.latitude),
            "longitude": float(self.longitude),
            "price_tier": self.price_tier.to_dict() if self.price_tier else None,
            "category": self.category.to_dict() if self.category else None,
        }


# Index for the owner's paginated index
owner_listings_index = Index(
    'idx_listings_owner_created',
    Listing.owner_id,
    Listing.created_at.desc()
)

# Index for public category pages
category_published_index = Index(
    'idx_listings_category_published',
    Listing.category_id,
    Listing.published
)
