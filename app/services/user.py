"""
User profile service for avatar images.
"""

from typing import Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.user import UserRepository
from app.models.user import User
from app.config import settings
from app.utils.exceptions import FileUploadError, ForbiddenError, NotFoundError
import uuid
import logging

logger = logging.getLogger(__name__)


class UserService:
    """Avatar upload, serving and removal."""

    def __init__(self, db_session: AsyncSession):
        self.user_repo = UserRepository(db_session)

    async def get_avatar(self, user_id: uuid.UUID) -> Optional[Tuple[bytes, str]]:
        """
        Get the stored avatar of a user.

        Returns:
            Tuple of (image bytes, content type), or None when no avatar was uploaded

        Raises:
            NotFoundError: If the user doesn't exist
        """
        user = await self.user_repo.get_with_avatar(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        if not user.avatar or not user.avatar_content_type:
            return None
        return user.avatar, user.avatar_content_type

    @staticmethod
    def placeholder_avatar_url(user_id: uuid.UUID) -> str:
        """Generated avatar used until the user uploads one."""
        return settings.default_avatar_url.format(seed=f"user-{user_id}")

    async def set_avatar(
        self,
        user_id: uuid.UUID,
        avatar: Optional[Tuple[bytes, str]],
        current_user: User
    ) -> User:
        """
        Replace the avatar of the current user.

        Raises:
            ForbiddenError: If the avatar belongs to another user
            FileUploadError: If no image was sent
        """
        self._require_own_profile(user_id, current_user)
        if avatar is None:
            raise FileUploadError("No avatar image provided")

        return await self.user_repo.set_avatar(current_user, avatar)

    async def delete_avatar(self, user_id: uuid.UUID, current_user: User) -> User:
        """
        Remove the avatar of the current user, falling back to the placeholder.

        Raises:
            ForbiddenError: If the avatar belongs to another user
        """
        self._require_own_profile(user_id, current_user)
        return await self.user_repo.set_avatar(current_user, None)

    @staticmethod
    def _require_own_profile(user_id: uuid.UUID, current_user: User) -> None:
        if current_user.id != user_id:
            logger.warning(f"User {current_user.id} tried to change the avatar of {user_id}")
            raise ForbiddenError("You can only change your own avatar")
