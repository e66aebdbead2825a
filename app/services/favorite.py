"""
Favorites service for a buyer's saved properties.
"""

from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.property import Property
from app.models.user import User
from app.repositories.favorite import FavoriteRepository
from app.repositories.property import PropertyRepository
from app.utils.exceptions import APIException, NotFoundError, BadRequestError, InternalServerError
import uuid
import logging

logger = logging.getLogger(__name__)


class FavoriteService:
    """Adds, removes and lists the caller's own favorites."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.favorite_repo = FavoriteRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def add_favorite(self, property_id: uuid.UUID, current_user: User) -> List[uuid.UUID]:
        """
        Add a property to the caller's favorites.

        Returns:
            Favorite property ids in insertion order

        Raises:
            NotFoundError: If the property doesn't exist
            BadRequestError: If it is already a favorite
        """
        try:
            if not await self.property_repo.exists(property_id):
                raise NotFoundError("Property")

            if await self.favorite_repo.is_favorite(current_user.id, property_id):
                raise BadRequestError("Property already in favorites")

            try:
                await self.favorite_repo.add_favorite(current_user.id, property_id)
            except IntegrityError:
                # Lost a race with a concurrent add of the same pair
                await self.db.rollback()
                raise BadRequestError("Property already in favorites")

            return await self.favorite_repo.get_favorite_ids(current_user.id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to add favorite {property_id} for user {current_user.id}: {e}")
            raise InternalServerError(str(e))

    async def remove_favorite(self, property_id: uuid.UUID, current_user: User) -> List[uuid.UUID]:
        """Remove a property from the caller's favorites; absent ids are ignored."""
        try:
            await self.favorite_repo.remove_favorite(current_user.id, property_id)
            return await self.favorite_repo.get_favorite_ids(current_user.id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to remove favorite {property_id} for user {current_user.id}: {e}")
            raise InternalServerError(str(e))

    async def get_favorites(self, current_user: User) -> List[Property]:
        try:
            return await self.favorite_repo.get_favorite_properties(current_user.id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to get favorites for user {current_user.id}: {e}")
            raise InternalServerError(str(e))

    async def is_favorite(self, property_id: uuid.UUID, current_user: User) -> bool:
        try:
            return await self.favorite_repo.is_favorite(current_user.id, property_id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to check favorite {property_id} for user {current_user.id}: {e}")
            raise InternalServerError(str(e))
