"""
Authentication service for registration, account confirmation, sign-in
and password recovery.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from realty.repositories.user import UserRepository
from realty.models.user import User
from realty.schemas.auth import RegisterForm, ResetPasswordForm
from realty.utils.auth import create_session_token, verify_session_token, generate_account_token
from realty.utils.exceptions import (
    ValidationError,
    UserNotFoundError,
    AccountNotConfirmedError,
    IncorrectPasswordError,
    InvalidTokenError,
)
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Identity store operations.
    The user's single token column backs both account confirmation and password reset.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, form: RegisterForm) -> User:
        """
        Store a new unconfirmed user holding a fresh confirmation token.

        Raises:
            ValidationError: If the email is already registered
        """
        if await self.user_repo.get_by_email(form.email):
            logger.warning(f"Registration refused for existing email {form.email}")
            raise ValidationError(
                "User already registered",
                field_errors=[{"field": "email", "message": "This email is already registered"}]
            )

        user = await self.user_repo.create_user({
            "name": form.name,
            "email": form.email,
            "password": form.password,
            "token": generate_account_token(),
        })
        logger.info(f"User registered: {user.email}")
        return user

    async def confirm_account(self, token: str) -> User:
        """
        Confirm the account holding the token and consume the token.

        Raises:
            InvalidTokenError: If no account holds the token
        """
        user = await self.user_repo.get_by_token(token)
        if not user:
            raise InvalidTokenError("Confirmation link is invalid or was already used")

        user = await self.user_repo.confirm(user)
        logger.info(f"Account confirmed: {user.email}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Check sign-in credentials.

        Raises:
            UserNotFoundError: If no account uses the email
            AccountNotConfirmedError: If the account is still unconfirmed
            IncorrectPasswordError: If the password is wrong
        """
        user = await self.user_repo.get_by_email(email)

        if not user:
            logger.warning(f"Sign-in attempt for unknown email: {email}")
            raise UserNotFoundError()

        if not user.confirmed:
            logger.warning(f"Sign-in attempt for unconfirmed account: {email}")
            raise AccountNotConfirmedError()

        if not user.verify_password(password):
            logger.warning(f"Incorrect password for: {email}")
            raise IncorrectPasswordError()

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    def create_session(self, user: User) -> str:
        """Signed session credential for the session cookie."""
        return create_session_token(user_id=user.id, name=user.name)

    async def get_user_from_session(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve the session cookie to a user.

        Returns:
            The user, or None for a missing, invalid or expired credential
        """
        if not token:
            return None

        try:
            payload = verify_session_token(token)
            user_id = uuid.UUID(payload.user_id)
        except (JWTError, ValueError) as e:
            logger.debug(f"Ignoring invalid session credential: {e}")
            return None

        return await self.user_repo.get_by_id(user_id)

    async def request_password_reset(self, email: str) -> User:
        """
        Give the account a fresh token for the password reset link.

        Raises:
            ValidationError: If no account uses the email
        """
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise ValidationError(
                "Unknown email",
                field_errors=[{"field": "email", "message": "This email does not belong to any user"}]
            )

        user = await self.user_repo.assign_token(user, generate_account_token())
        logger.info(f"Password reset requested for {user.email}")
        return user

    async def check_reset_token(self, token: str) -> User:
        """
        Raises:
            InvalidTokenError: If no account holds the token
        """
        user = await self.user_repo.get_by_token(token)
        if not user:
            raise InvalidTokenError("Password reset link is invalid or expired")
        return user

    async def reset_password(self, token: str, form: ResetPasswordForm) -> User:
        """
        Replace the password of the account holding the token and consume the token.

        Raises:
            InvalidTokenError: If no account holds the token
        """
        user = await self.check_reset_token(token)
        return await self.user_repo.update_password(user, form.password)
