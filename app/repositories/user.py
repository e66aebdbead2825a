"""
User repository for moderation and identity lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from app.repositories.base import BaseRepository
from app.models.user import User, UserRole
from app.models.favorite import Favorite
from typing import Optional, List, Dict, Any
import uuid
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user records.
    Accounts are created by the identity provider; this covers lookups and moderation.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a user with email validation.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, name
                      Optional: phone, role (defaults to BUYER), is_active

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

            create_data = {
                **user_data,
                "email": email,
                "role": user_data.get("role", UserRole.BUYER),
                "is_active": user_data.get("is_active", True)
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

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            query = select(User).where(User.email == email.lower().strip())
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def get_users_by_role(self, role: UserRole) -> List[User]:
        """
        Get all users with a role, newest first.

        Args:
            role: Role to filter by

        Returns:
            List of users
        """
        return await self.get_multi(filters={"role": role}, order_by="-created_at")

    async def update_user_status(self, user_id: uuid.UUID, is_active: bool) -> Optional[User]:
        """
        Update user's active status.

        Args:
            user_id: UUID of the user
            is_active: New active status

        Returns:
            Updated user instance or None if not found
        """
        updated_user = await self.update(user_id, {"is_active": is_active})

        if updated_user:
            status = "activated" if is_active else "suspended"
            logger.info(f"User {updated_user.email} {status}")

        return updated_user

    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """
        Delete a user together with their favorites.

        Args:
            user_id: UUID of the user

        Returns:
            True if the user was deleted
        """
        try:
            await self.db.execute(delete(Favorite).where(Favorite.user_id == user_id))
            result = await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()

            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"Deleted user {user_id}")
            return deleted
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise
