"""
Inquiry repository for lead records.
Owner scoping is applied through the referenced property.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.repositories.base import BaseRepository
from app.models.inquiry import Inquiry, InquiryStatus
from app.models.property import Property
from typing import Optional, List
import uuid
import logging

logger = logging.getLogger(__name__)


class InquiryRepository(BaseRepository[Inquiry]):
    """Repository for inquiries, always returned newest first."""

    def __init__(self, db: AsyncSession):
        super().__init__(Inquiry, db)

    async def get_inquiries(
        self,
        property_id: Optional[uuid.UUID] = None,
        owner_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None
    ) -> List[Inquiry]:
        """
        Get inquiries, optionally scoped to one property or to an owner's properties.

        Args:
            property_id: Only inquiries for this property
            owner_id: Only inquiries on properties owned by this user
            limit: Maximum number of inquiries to return

        Returns:
            List of inquiries with their property loaded
        """
        try:
            query = select(Inquiry)

            if property_id is not None:
                query = query.where(Inquiry.property_id == property_id)

            if owner_id is not None:
                query = query.join(Property, Inquiry.property_id == Property.id).where(
                    Property.owner_id == owner_id
                )

            query = query.order_by(Inquiry.created_at.desc())
            if limit is not None:
                query = query.limit(limit)

            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get inquiries: {e}")
            raise

    async def count_for_owner(self, owner_id: uuid.UUID) -> int:
        """
        Count inquiries on properties owned by a user.

        Args:
            owner_id: UUID of the owner

        Returns:
            Number of inquiries
        """
        try:
            query = (
                select(func.count(Inquiry.id))
                .join(Property, Inquiry.property_id == Property.id)
                .where(Property.owner_id == owner_id)
            )
            result = await self.db.execute(query)
            return result.scalar() or 0
        except Exception as e:
            logger.error(f"Failed to count inquiries for owner {owner_id}: {e}")
            raise

    async def update_status(self, inquiry_id: uuid.UUID, status: InquiryStatus) -> Optional[Inquiry]:
        """
        Set the status of an inquiry. Any status may follow any other.

        Args:
            inquiry_id: UUID of the inquiry
            status: New status

        Returns:
            Updated inquiry or None if not found
        """
        updated = await self.update(inquiry_id, {"status": status})
        if updated:
            logger.info(f"Inquiry {inquiry_id} status set to {status.value}")
        return updated
