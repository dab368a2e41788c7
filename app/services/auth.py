"""
Authentication service for registration, login and token management.
Handles JWT token generation, validation and user authentication flows.
"""

from typing import Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.models.user import User
from app.schemas.user import UserCreate
from app.utils.auth import (
    create_access_token,
    create_refresh_token,
    verify_token
)
from app.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    NotFoundError,
    ValidationError,
    BadRequestError,
    DuplicateEmailError
)
from jose import JWTError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and their tokens.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, user_data: UserCreate) -> User:
        """
        Register a new account.

        Args:
            user_data: Registration data (name, email, password)

        Returns:
            Created user instance

        Raises:
            DuplicateEmailError: If the email already has an account
            BadRequestError: If the account could not be created
        """
        try:
            is_available = await self.user_repo.check_email_availability(user_data.email)
            if not is_available:
                raise DuplicateEmailError()

            user = await self.user_repo.create_user(user_data.model_dump())

            logger.info(f"User registered: {user.email} (ID: {user.id})")
            return user

        except DuplicateEmailError:
            logger.info(f"Registration rejected, email taken: {user_data.email}")
            raise
        except IntegrityError:
            # Lost a race with a concurrent registration
            logger.info(f"Registration rejected by unique email constraint: {user_data.email}")
            raise DuplicateEmailError()
        except ValueError as e:
            if "already exists" in str(e):
                raise DuplicateEmailError()
            raise BadRequestError(str(e))
        except Exception as e:
            logger.error(f"Failed to register user {user_data.email}: {e}")
            raise BadRequestError(f"Failed to register user: {str(e)}")

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Args:
            email: User's email address
            password: Plain text password

        Returns:
            Authenticated User object

        Raises:
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
            ValidationError: If input validation fails
        """
        try:
            if not email or not email.strip():
                raise ValidationError("Email is required")

            if not password:
                raise ValidationError("Password is required")

            user = await self.user_repo.authenticate_user(email, password)

            if not user:
                logger.warning(f"Failed authentication attempt for email: {email}")
                raise InvalidCredentialsError()

            if not user.is_active:
                raise InactiveUserError()

            logger.info(f"User authenticated successfully: {user.email}")
            return user

        except (ValidationError, InvalidCredentialsError, InactiveUserError):
            raise
        except Exception as e:
            logger.error(f"Authentication error for {email}: {e}")
            raise InvalidCredentialsError()

    def create_tokens(self, user: User) -> Tuple[str, str]:
        """
        Create access and refresh tokens for user.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        access_token = create_access_token(user_id=user.id, email=user.email)
        refresh_token = create_refresh_token(user_id=user.id, email=user.email)
        return access_token, refresh_token

    async def login(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user and create tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)

        Raises:
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
        """
        user = await self.authenticate_user(email, password)
        access_token, refresh_token = self.create_tokens(user)

        return user, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create new access token from refresh token.

        Raises:
            InvalidTokenError: If refresh token is invalid
            TokenExpiredError: If refresh token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            token_payload = verify_token(refresh_token, token_type="refresh")
            user = await self.get_user_by_id(uuid.UUID(token_payload.user_id))

            if not user.is_active:
                raise InactiveUserError()

            return create_access_token(user_id=user.id, email=user.email)

        except JWTError as e:
            if "expired" in str(e).lower():
                raise TokenExpiredError()
            raise InvalidTokenError(str(e))
        except NotFoundError:
            raise InvalidTokenError("Token subject no longer exists")

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Args:
            token: JWT access token

        Returns:
            Current User object

        Raises:
            InvalidTokenError: If token is invalid or its user is gone
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            token_payload = verify_token(token, token_type="access")
            user = await self.get_user_by_id(uuid.UUID(token_payload.user_id))

            if not user.is_active:
                raise InactiveUserError()

            return user

        except JWTError as e:
            if "expired" in str(e).lower():
                raise TokenExpiredError()
            raise InvalidTokenError(str(e))
        except NotFoundError:
            raise InvalidTokenError("Token subject no longer exists")

    async def get_user_by_id(self, user_id: uuid.UUID) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If user not found
        """
        try:
            user = await self.user_repo.get_by_id(user_id)

            if not user:
                raise NotFoundError("User", str(user_id))

            return user

        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to get user by ID {user_id}: {e}")
            raise BadRequestError(f"Failed to retrieve user: {str(e)}")
