"""
Admin service: dashboard analytics and moderation.
Aggregates are scoped to the calling admin's own listings; buyer moderation is global.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.inquiry import Inquiry
from app.models.property import Property, PropertyStatus
from app.models.user import User, UserRole
from app.repositories.inquiry import InquiryRepository
from app.repositories.property import PropertyRepository
from app.repositories.user import UserRepository
from app.utils.exceptions import (
    APIException,
    BadRequestError,
    NotFoundError,
    ValidationError,
    InternalServerError,
    InsufficientPermissionsError
)
from app.utils.validators import ValidationUtils
import uuid
import logging

logger = logging.getLogger(__name__)

RECENT_INQUIRIES_LIMIT = 5
TOP_PROPERTIES_LIMIT = 5
TREND_MONTHS = 6


def months_back_start(now: datetime, months: int) -> datetime:
    """
    First instant of the calendar month `months` before `now`.

    Args:
        now: Reference time
        months: Number of months to go back

    Returns:
        Datetime at midnight on the first day of that month, in now's timezone
    """
    month_index = now.year * 12 + (now.month - 1) - months
    return now.replace(
        year=month_index // 12,
        month=month_index % 12 + 1,
        day=1,
        hour=0,
        minute=0,
        second=0,
        microsecond=0
    )


class AdminService:
    """Analytics and moderation operations for admins."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.property_repo = PropertyRepository(db_session)
        self.inquiry_repo = InquiryRepository(db_session)

    async def get_analytics(self, admin: User) -> Dict[str, Any]:
        """
        Build the dashboard for an admin.

        Args:
            admin: Calling admin; listing aggregates cover only their properties

        Returns:
            Dict with overview, recent_inquiries, top_properties,
            properties_by_type and monthly_stats
        """
        try:
            status_counts = await self.property_repo.count_by_status(admin.id)
            total_buyers = await self.user_repo.count({"role": UserRole.BUYER})
            total_inquiries = await self.inquiry_repo.count_for_owner(admin.id)

            recent_inquiries = await self.inquiry_repo.get_inquiries(owner_id=admin.id, limit=RECENT_INQUIRIES_LIMIT)
            top_properties = await self.property_repo.get_most_viewed(admin.id, limit=TOP_PROPERTIES_LIMIT)
            by_type = await self.property_repo.count_by_type(admin.id)

            since = months_back_start(datetime.now(timezone.utc), TREND_MONTHS)
            monthly = await self.property_repo.count_by_month(admin.id, since)

            return {
                "overview": {
                    "total_properties": sum(status_counts.values()),
                    "total_buyers": total_buyers,
                    "total_inquiries": total_inquiries,
                    "available_properties": status_counts[PropertyStatus.AVAILABLE.value],
                    "pending_properties": status_counts[PropertyStatus.PENDING.value],
                    "sold_properties": status_counts[PropertyStatus.SOLD.value],
                },
                "recent_inquiries": [inquiry.to_dict() for inquiry in recent_inquiries],
                "top_properties": [listing.to_dict(include_owner=False) for listing in top_properties],
                "properties_by_type": by_type,
                "monthly_stats": monthly,
            }
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to build analytics for admin {admin.id}: {e}")
            raise InternalServerError(str(e))

    async def get_buyers(self) -> List[User]:
        """All buyers, newest first."""
        try:
            return await self.user_repo.get_users_by_role(UserRole.BUYER)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to list buyers: {e}")
            raise InternalServerError(str(e))

    async def toggle_user_status(self, user_id: uuid.UUID) -> User:
        """
        Suspend an active user or reactivate a suspended one.

        Raises:
            NotFoundError: If the user doesn't exist
            BadRequestError: If the user is an admin
        """
        try:
            user = await self._get_moderatable_user(user_id, "Cannot modify admin accounts")
            return await self.user_repo.update_user_status(user_id, not user.is_active)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to toggle status of user {user_id}: {e}")
            raise InternalServerError(str(e))

    async def delete_user(self, user_id: uuid.UUID) -> None:
        """
        Delete a non-admin user.

        Raises:
            NotFoundError: If the user doesn't exist
            BadRequestError: If the user is an admin
        """
        try:
            await self._get_moderatable_user(user_id, "Cannot delete admin accounts")
            await self.user_repo.delete_user(user_id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise InternalServerError(str(e))

    async def get_inquiries(self, admin: User) -> List[Inquiry]:
        """Inquiries on the admin's own properties, newest first."""
        try:
            return await self.inquiry_repo.get_inquiries(owner_id=admin.id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to get inquiries for admin {admin.id}: {e}")
            raise InternalServerError(str(e))

    async def update_property_status(self, property_id: uuid.UUID, status: Any, admin: User) -> Property:
        """
        Force the status of one of the admin's own properties.

        Raises:
            ValidationError: If the status is invalid
            NotFoundError: If the property doesn't exist
            InsufficientPermissionsError: If the admin doesn't own it
        """
        try:
            new_status = ValidationUtils.validate_enum(status, PropertyStatus, "status")
            if new_status is None:
                raise ValidationError("Status is required")

            property_obj = await self.property_repo.get_by_id(property_id)
            if property_obj is None:
                raise NotFoundError("Property")

            if property_obj.owner_id != admin.id:
                raise InsufficientPermissionsError("update this property")

            return await self.property_repo.update_property_status(property_id, new_status)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update status of property {property_id}: {e}")
            raise InternalServerError(str(e))

    async def _get_moderatable_user(self, user_id: uuid.UUID, admin_message: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User")
        if user.is_admin:
            raise BadRequestError(admin_message)
        return user
