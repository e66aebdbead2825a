"""
Favorite repository managing a user's saved properties.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from app.repositories.base import BaseRepository
from app.models.favorite import Favorite
from app.models.property import Property
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteRepository(BaseRepository[Favorite]):
    """Repository for favorites, ordered by insertion."""

    def __init__(self, db: AsyncSession):
        super().__init__(Favorite, db)

    async def is_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """
        Check whether a property is in a user's favorites.

        Args:
            user_id: UUID of the user
            property_id: UUID of the property

        Returns:
            True if the property is a favorite
        """
        try:
            query = select(func.count(Favorite.id)).where(
                Favorite.user_id == user_id,
                Favorite.property_id == property_id
            )
            result = await self.db.execute(query)
            return (result.scalar() or 0) > 0
        except Exception as e:
            logger.error(f"Failed to check favorite {user_id}/{property_id}: {e}")
            raise

    async def add_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> Favorite:
        """
        Add a property to a user's favorites.

        Args:
            user_id: UUID of the user
            property_id: UUID of the property

        Returns:
            Created favorite
        """
        favorite = await self.create({"user_id": user_id, "property_id": property_id})
        logger.info(f"User {user_id} added property {property_id} to favorites")
        return favorite

    async def remove_favorite(self, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
        """
        Remove a property from a user's favorites. Removing a non-member is not an error.

        Args:
            user_id: UUID of the user
            property_id: UUID of the property

        Returns:
            True if a favorite was removed
        """
        try:
            stmt = delete(Favorite).where(
                Favorite.user_id == user_id,
                Favorite.property_id == property_id
            )
            result = await self.db.execute(stmt)
            await self.db.commit()
            return result.rowcount > 0
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to remove favorite {user_id}/{property_id}: {e}")
            raise

    async def get_favorite_ids(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        """
        Get the property ids in a user's favorites, in insertion order.

        Args:
            user_id: UUID of the user

        Returns:
            List of property ids
        """
        try:
            query = (
                select(Favorite.property_id)
                .where(Favorite.user_id == user_id)
                .order_by(Favorite.created_at.asc())
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get favorites for user {user_id}: {e}")
            raise

    async def get_favorite_properties(self, user_id: uuid.UUID) -> List[Property]:
        """
        Get the properties in a user's favorites, in insertion order.

        Args:
            user_id: UUID of the user

        Returns:
            List of properties with their owner loaded
        """
        try:
            query = (
                select(Property)
                .join(Favorite, Favorite.property_id == Property.id)
                .where(Favorite.user_id == user_id)
                .order_by(Favorite.created_at.asc())
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get favorite properties for user {user_id}: {e}")
            raise
