"""
Inquiry service for buyer leads and the public contact form.
Submissions are stored first; email notifications run after the response.
"""

from typing import Optional, List, Dict, Any
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.inquiry import Inquiry, InquiryStatus, MAX_MESSAGE_LENGTH
from app.models.user import User
from app.repositories.inquiry import InquiryRepository
from app.repositories.property import PropertyRepository
from app.services.notifications import Notifier, render_inquiry_email, render_contact_email
from app.utils.exceptions import (
    APIException,
    NotFoundError,
    ValidationError,
    InternalServerError,
    InsufficientPermissionsError
)
from app.utils.validators import ValidationUtils
import uuid
import logging

logger = logging.getLogger(__name__)

INVALID_EMAIL_MESSAGE = "Please provide a valid email"
MESSAGE_TOO_LONG = f"Message cannot be more than {MAX_MESSAGE_LENGTH} characters"


class InquiryService:
    """
    Inquiry service: public submission plus owner/admin management.
    """

    def __init__(self, db_session: AsyncSession, notifier: Notifier):
        self.db = db_session
        self.notifier = notifier
        self.inquiry_repo = InquiryRepository(db_session)
        self.property_repo = PropertyRepository(db_session)

    async def submit_inquiry(self, payload: Dict[str, Any], background_tasks: BackgroundTasks) -> Inquiry:
        """
        Record a buyer inquiry and queue the owner and admin notifications.

        Args:
            payload: name, email, phone, message and propertyId
            background_tasks: Request background tasks used for email

        Returns:
            Created inquiry with its property and owner loaded

        Raises:
            ValidationError: If fields are missing or malformed
            NotFoundError: If the property doesn't exist
        """
        try:
            ValidationUtils.require_fields(payload, ("name", "email", "message", "propertyId"))

            email = payload["email"].strip()
            if not Inquiry.is_valid_email(email):
                raise ValidationError(INVALID_EMAIL_MESSAGE, field_errors=[{"field": "email", "message": INVALID_EMAIL_MESSAGE}])

            message = payload["message"]
            if len(message) > MAX_MESSAGE_LENGTH:
                raise ValidationError(MESSAGE_TOO_LONG, field_errors=[{"field": "message", "message": MESSAGE_TOO_LONG}])

            property_id = ValidationUtils.validate_uuid(payload["propertyId"], "propertyId")
            property_obj = await self.property_repo.get_by_id(property_id)
            if property_obj is None:
                raise NotFoundError("Property")

            phone = payload.get("phone") or None
            inquiry = await self.inquiry_repo.create({
                "name": payload["name"].strip(),
                "email": email,
                "phone": phone,
                "message": message,
                "property_id": property_id,
            })
            logger.info(f"Inquiry {inquiry.id} submitted for property {property_id}")

            background_tasks.add_task(
                self.notify_inquiry,
                title=property_obj.title,
                owner_email=property_obj.owner.email if property_obj.owner else None,
                name=inquiry.name,
                email=inquiry.email,
                phone=phone,
                message=message
            )
            return inquiry
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to submit inquiry: {e}")
            raise InternalServerError(str(e))

    async def notify_inquiry(
        self,
        title: str,
        owner_email: Optional[str],
        name: str,
        email: str,
        phone: Optional[str],
        message: str
    ) -> None:
        """Email the property owner and an admin copy. Failures are only logged."""
        subject = f"New inquiry for: {title or 'your property'}"
        html = render_inquiry_email(title or "Property", name, email, phone, message)

        try:
            if owner_email:
                await self.notifier.send_email(owner_email, subject, html)
            if self.notifier.admin_email:
                await self.notifier.send_email(self.notifier.admin_email, f"[Admin Copy] {subject}", html)
        except Exception as e:
            logger.warning(f"Inquiry email notification failed: {e}")

    async def get_property_inquiries(self, property_id: uuid.UUID, current_user: User) -> List[Inquiry]:
        """
        Inquiries for one property, newest first.

        Raises:
            NotFoundError: If the property doesn't exist
            InsufficientPermissionsError: If the caller is neither owner nor admin
        """
        try:
            property_obj = await self.property_repo.get_by_id(property_id)
            if property_obj is None:
                raise NotFoundError("Property")

            if not current_user.can_manage_property(property_obj.owner_id):
                raise InsufficientPermissionsError("view these inquiries")

            return await self.inquiry_repo.get_inquiries(property_id=property_id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to get inquiries for property {property_id}: {e}")
            raise InternalServerError(str(e))

    async def get_inquiries(self, current_user: User) -> List[Inquiry]:
        """All inquiries for an admin, otherwise those on the caller's properties."""
        try:
            owner_id = None if current_user.is_admin else current_user.id
            return await self.inquiry_repo.get_inquiries(owner_id=owner_id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to get inquiries for user {current_user.id}: {e}")
            raise InternalServerError(str(e))

    async def update_inquiry_status(self, inquiry_id: uuid.UUID, status: Any, current_user: User) -> Inquiry:
        """
        Move an inquiry to any status.

        Raises:
            ValidationError: If the status is not pending, contacted or closed
            NotFoundError: If the inquiry doesn't exist
            InsufficientPermissionsError: If the caller doesn't manage the property
        """
        try:
            new_status = ValidationUtils.validate_enum(status, InquiryStatus, "status")
            if new_status is None:
                raise ValidationError("Status is required")

            inquiry = await self.inquiry_repo.get_by_id(inquiry_id)
            if inquiry is None:
                raise NotFoundError("Inquiry")

            owner_id = inquiry.property.owner_id if inquiry.property else None
            if not current_user.can_manage_property(owner_id):
                raise InsufficientPermissionsError("update this inquiry")

            return await self.inquiry_repo.update_status(inquiry_id, new_status)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update inquiry {inquiry_id}: {e}")
            raise InternalServerError(str(e))


class ContactService:
    """Relays public contact-form messages to the admin mailbox."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier

    async def submit_contact(self, payload: Dict[str, Any]) -> str:
        """
        Forward a contact message to ADMIN_EMAIL.

        Returns:
            Confirmation message for the caller

        Raises:
            ValidationError: If name, email or message is missing
        """
        ValidationUtils.require_fields(payload, ("name", "email", "message"), "Missing required fields")

        if not self.notifier.admin_email:
            logger.info("Contact message received but ADMIN_EMAIL is not set")
            return "Message received (email not configured)"

        name = payload["name"].strip()
        html = render_contact_email(name, payload["email"].strip(), payload.get("phone") or None, payload["message"])
        result = await self.notifier.send_email(self.notifier.admin_email, f"New contact message from {name}", html)
        if not result.get("sent"):
            logger.warning(f"Contact message from {name} not delivered: {result.get('reason')}")

        return "Message sent successfully"
