"""
User repository for authentication and Stripe Connect account data.
Provides secure user operations with password handling.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import undefer
from app.repositories.base import BaseRepository
from app.models.user import User
from typing import Optional, Dict, Any, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with authentication support.
    Also stores the Stripe account and checkout session snapshots of a user.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: name, email, password

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the email is taken
            Exception: If database operation fails
        """
        try:
            email = User.validate_email_format(user_data["email"])

            existing_user = await self.get_by_email(email)
            if existing_user:
                raise ValueError(f"User with email {email} already exists")

            password = user_data.pop("password")
            hashed_password = User.hash_password(password)

            create_data = {
                **user_data,
                "name": user_data["name"].strip(),
                "email": email,
                "hashed_password": hashed_password,
                "is_active": user_data.get("is_active", True),
            }

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to create user: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()

            result = await self.db.execute(select(User).where(User.email == normalized_email))
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {email}")
            else:
                logger.debug(f"User with email {email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.
        Account status is checked by the caller.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            User instance if the credentials match, None otherwise
        """
        try:
            user = await self.get_by_email(email)

            if not user:
                logger.debug(f"Authentication failed: user {email} not found")
                return None

            if not user.verify_password(password):
                logger.debug(f"Authentication failed: invalid password for {email}")
                return None

            logger.info(f"User authenticated successfully: {email}")
            return user
        except Exception as e:
            logger.error(f"Failed to authenticate user {email}: {e}")
            raise

    async def check_email_availability(self, email: str) -> bool:
        """
        Check if email address is available for registration.

        Args:
            email: Email address to check

        Returns:
            True if email is available, False if taken
        """
        try:
            normalized_email = User.validate_email_format(email)

            result = await self.db.execute(
                select(func.count(User.id)).where(User.email == normalized_email)
            )
            is_available = result.scalar() == 0
            logger.debug(f"Email {email} availability: {is_available}")
            return is_available
        except ValueError as e:
            logger.error(f"Invalid email format: {e}")
            return False
        except Exception as e:
            logger.error(f"Failed to check email availability: {e}")
            raise

    async def set_stripe_account(self, user: User, account_id: str) -> User:
        """Store the connected Stripe account ID on the user."""
        user.stripe_account_id = account_id
        saved = await self.save(user)
        logger.info(f"Stored Stripe account {account_id} for user {user.email}")
        return saved

    async def set_stripe_seller(self, user: User, account: Dict[str, Any]) -> User:
        """Store the latest connected account snapshot on the user."""
        user.stripe_seller = account
        return await self.save(user)

    async def set_stripe_session(self, user: User, session: Optional[Dict[str, Any]]) -> User:
        """
        Store (or clear, with None) the pending checkout session of a user.

        Args:
            user: User placing the booking
            session: Checkout session snapshot, or None to clear it

        Returns:
            Updated user instance
        """
        user.stripe_session = session
        saved = await self.save(user)
        if session is None:
            logger.debug(f"Cleared pending checkout session for user {user.id}")
        else:
            logger.debug(f"Stored checkout session {session.get('id')} for user {user.id}")
        return saved

    async def get_with_avatar(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user with the avatar bytes loaded."""
        query = (
            select(User)
            .options(undefer(User.avatar))
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def set_avatar(self, user: User, avatar: Optional[Tuple[bytes, str]]) -> User:
        """
        Store (or clear, with None) the avatar of a user.

        Args:
            user: Account owning the avatar
            avatar: Tuple of (image bytes, content type), or None to remove it

        Returns:
            Updated user instance
        """
        user.avatar, user.avatar_content_type = avatar if avatar else (None, None)
        saved = await self.save(user)
        logger.info(f"{'Stored' if avatar else 'Removed'} avatar for user {user.id}")
        return saved
