"""
InquiryMessage model: append-only messages from buyers about a listing.
"""

from sqlalchemy import Text, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Uuid
from realty.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from realty.models.listing import Listing
    from realty.models.user import User


class InquiryMessage(Base):
    """Message sent by a user about a listing. Never updated once stored."""

    __tablename__ = "inquiry_messages"

    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Message text"
    )

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    listing: Mapped["Listing"] = relationship("Listing", back_populates="messages", lazy="raise")

    sender: Mapped["User"] = relationship("User", lazy="raise")

    def __repr__(self) -> str:
        return f"<InquiryMessage(id={self.id}, listing_id={self.listing_id}, sender_id={self.sender_id})>"


listing_messages_index = Index(
    'idx_inquiry_messages_listing_created',
    InquiryMessage.listing_id,
    InquiryMessage.created_at.asc()
)
