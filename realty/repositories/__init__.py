"""
Repository layer for data access.
"""

from .base import BaseRepository
from .user import UserRepository
from .listing import ListingRepository
from .message import MessageRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ListingRepository",
    "MessageRepository",
]
