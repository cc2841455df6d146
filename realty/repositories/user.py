"""
User repository for authentication and account token operations.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from realty.repositories.base import BaseRepository
from realty.models.user import User
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Handles password hashing on creation and lookups by email or one-time token.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: name, email, password
                      Optional: confirmed (defaults to False), token

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the email is taken
        """
        try:
            email = User.validate_email_format(user_data["email"])

            existing_user = await self.get_by_email(email)
            if existing_user:
                raise ValueError(f"User with email {email} already exists")

            password = user_data.pop("password")

            create_data = {
                **user_data,
                "email": email,
                "hashed_password": User.hash_password(password),
                "confirmed": user_data.get("confirmed", False),
            }

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Returns:
            User instance if found, None otherwise
        """
        normalized_email = email.lower().strip()
        result = await self.db.execute(select(User).where(User.email == normalized_email))
        user = result.scalar_one_or_none()

        if not user:
            logger.debug(f"User with email {email} not found")

        return user

    async def get_by_token(self, token: str) -> Optional[User]:
        """
        Get the user holding an outstanding one-time token.
        """
        if not token:
            return None

        result = await self.db.execute(select(User).where(User.token == token))
        return result.scalar_one_or_none()

    async def update_password(self, user: User, new_password: str) -> User:
        """
        Re-hash the password and clear the outstanding token.

        Raises:
            ValueError: If password validation fails
        """
        user.set_password(new_password)
        user.token = None
        updated_user = await self.save(user)
        logger.info(f"Password updated for user: {updated_user.email}")
        return updated_user

    async def confirm(self, user: User) -> User:
        """Mark the account confirmed and consume its token."""
        user.confirmed = True
        user.token = None
        return await self.save(user)

    async def assign_token(self, user: User, token: str) -> User:
        user.token = token
        return await self.save(user)
