"""
Property service for managing property listings with business logic validation.
Handles listing CRUD, media changes through the storage service, search and view counting.
"""

from typing import Optional, List, Dict, Any
from decimal import Decimal
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.models.property import Property, PropertyType, PropertyStatus
from app.models.user import User
from app.services.storage import StorageService
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

REQUIRED_FIELDS = ("title", "description", "price", "location")
MISSING_FIELDS_MESSAGE = "Missing required fields: title, description, price, location"
NO_IMAGES_MESSAGE = "Please upload at least one image"


class PropertyService:
    """
    Property service for managing property listings.
    Media uploads go through the injected StorageService; everything else
    goes through the property repository.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[StorageService] = None):
        self.db = db_session
        self.storage = storage
        self.property_repo = PropertyRepository(db_session)

    async def list_properties(self, filters: PropertySearchFilters) -> List[Property]:
        """
        Search listings. Every matching property is returned, owner joined.

        Args:
            filters: Search criteria

        Returns:
            List of matching properties
        """
        try:
            return await self.property_repo.search_properties(filters)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to list properties: {e}")
            raise InternalServerError(str(e))

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Fetch a property for display, counting the view.

        Args:
            property_id: UUID of the property

        Returns:
            Property with its incremented view count

        Raises:
            NotFoundError: If property doesn't exist
        """
        try:
            property_obj = await self.property_repo.increment_views(property_id)
            if property_obj is None:
                raise NotFoundError("Property")

            logger.debug(f"Property {property_id} viewed ({property_obj.views} views)")
            return property_obj
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to get property {property_id}: {e}")
            raise InternalServerError(str(e))

    async def get_similar_properties(self, property_id: uuid.UUID) -> List[Property]:
        """
        Get up to four properties of the same type within 20% of its price.

        Raises:
            NotFoundError: If the source property doesn't exist
        """
        try:
            source = await self.property_repo.get_by_id(property_id)
            if source is None:
                raise NotFoundError("Property")

            return await self.property_repo.get_similar_properties(source)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to get similar properties for {property_id}: {e}")
            raise InternalServerError(str(e))

    async def get_my_properties(self, current_user: User) -> List[Property]:
        """Properties owned by the caller, newest first."""
        try:
            return await self.property_repo.get_properties_by_owner(current_user.id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to get listings for user {current_user.id}: {e}")
            raise InternalServerError(str(e))

    async def create_property(
        self,
        form: Dict[str, Any],
        uploads: Dict[str, List[UploadFile]],
        current_user: User
    ) -> Property:
        """
        Create a listing from a multipart form.

        Args:
            form: Raw form fields (title, description, price, location, ...)
            uploads: Files keyed by field, "images" and optionally "model"
            current_user: Seller or admin creating the listing

        Returns:
            Created property instance

        Raises:
            ValidationError: If required fields or images are missing, or a value is malformed
            FileUploadError: If an upload is rejected
        """
        stored: List[str] = []
        try:
            ValidationUtils.require_fields(form, REQUIRED_FIELDS, MISSING_FIELDS_MESSAGE)

            property_data = self._coerce_fields(form)
            property_data["property_type"] = property_data.get("property_type") or PropertyType.HOUSE
            for count_field in ("bedrooms", "bathrooms", "area"):
                property_data[count_field] = property_data.get(count_field) or 0

            if not any(upload.filename for upload in uploads.get("images") or []):
                raise ValidationError(NO_IMAGES_MESSAGE)

            urls = await self._get_storage().store_uploads(uploads)
            stored = urls.get("images", []) + urls.get("model", [])

            property_data["images"] = urls.get("images", [])
            property_data["model_url"] = (urls.get("model") or [None])[0]
            property_data["owner_id"] = current_user.id

            try:
                property_obj = await self.property_repo.create_property(property_data)
            except ValueError as e:
                raise ValidationError(str(e))

            logger.info(
                f"Property created by {current_user.email}: {property_obj.title} "
                f"(ID: {property_obj.id}, images: {len(property_obj.images)}, model: {bool(property_obj.model_url)})"
            )
            return property_obj
        except APIException:
            await self._discard(stored)
            raise
        except Exception as e:
            await self._discard(stored)
            logger.error(f"Failed to create property for user {current_user.id}: {e}")
            raise InternalServerError(str(e))

    async def update_property(
        self,
        property_id: uuid.UUID,
        form: Dict[str, Any],
        uploads: Dict[str, List[UploadFile]],
        current_user: User
    ) -> Property:
        """
        Partially update a listing. Only fields present in the form change.

        Args:
            property_id: UUID of the property to update
            form: Raw form fields, plus imagesToDelete (JSON array) and deleteModel ("true")
            uploads: Files keyed by field, "newImages" and optionally "newModel"
            current_user: Seller or admin updating the listing

        Returns:
            Updated property instance

        Raises:
            NotFoundError: If property doesn't exist
            InsufficientPermissionsError: If the caller is neither owner nor admin
            ValidationError: If a value is malformed
        """
        stored: List[str] = []
        try:
            existing = await self.property_repo.get_by_id(property_id)
            if existing is None:
                raise NotFoundError("Property")

            if not current_user.can_manage_property(existing.owner_id):
                raise InsufficientPermissionsError("update this property")

            update_data = self._coerce_fields(form)
            images_to_delete = ValidationUtils.parse_json_list(form.get("imagesToDelete"), "imagesToDelete")

            # Validate the remaining form before any file is written
            urls = await self._get_storage().store_uploads(uploads) if uploads else {}
            new_images = urls.get("newImages", [])
            new_model = (urls.get("newModel") or [None])[0]
            stored = new_images + ([new_model] if new_model else [])

            current_images = list(existing.images or [])
            removed_files = [url for url in current_images if url in images_to_delete]
            if images_to_delete or new_images:
                update_data["images"] = [url for url in current_images if url not in images_to_delete] + new_images

            if form.get("deleteModel") == "true" or new_model:
                if existing.model_url:
                    removed_files.append(existing.model_url)
                update_data["model_url"] = new_model

            if not update_data:
                return existing

            updated = await self.property_repo.update(property_id, update_data)
            await self._release(removed_files)

            logger.info(f"Property {property_id} updated by {current_user.email}: {sorted(update_data)}")
            return updated
        except APIException:
            await self._discard(stored)
            raise
        except Exception as e:
            await self._discard(stored)
            logger.error(f"Failed to update property {property_id}: {e}")
            raise InternalServerError(str(e))

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a listing with its inquiries and favorite references.

        Raises:
            NotFoundError: If property doesn't exist
            InsufficientPermissionsError: If the caller is neither owner nor admin
        """
        try:
            existing = await self.property_repo.get_by_id(property_id)
            if existing is None:
                raise NotFoundError("Property")

            if not current_user.can_manage_property(existing.owner_id):
                raise InsufficientPermissionsError("delete this property")

            await self.property_repo.delete_property_cascade(property_id)

            logger.info(f"Property {property_id} deleted by {current_user.email}")
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise InternalServerError(str(e))

    def _coerce_fields(self, form: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert the scalar form fields that are present into column values.

        Raises:
            ValidationError: If a number or enum value is malformed
        """
        data: Dict[str, Any] = {}

        for text_field in ("title", "description", "location", "seo_title", "seo_description"):
            value = form.get(text_field)
            if not ValidationUtils.is_blank(value):
                data[text_field] = value.strip()

        price = ValidationUtils.validate_decimal(form.get("price"), "Price", min_value=Decimal("0"))
        if price is not None:
            data["price"] = price

        for count_field in ("bedrooms", "bathrooms", "area"):
            # A field sent empty resets the count
            if form.get(count_field) is not None:
                data[count_field] = ValidationUtils.validate_integer(
                    form.get(count_field), count_field.capitalize(), min_value=0, default=0
                )

        for coordinate in ("latitude", "longitude"):
            value = ValidationUtils.validate_decimal(form.get(coordinate), coordinate.capitalize())
            if value is not None:
                data[coordinate] = value

        property_type = ValidationUtils.validate_enum(form.get("propertyType"), PropertyType, "property type")
        if property_type is not None:
            data["property_type"] = property_type

        status = ValidationUtils.validate_enum(form.get("status"), PropertyStatus, "status")
        if status is not None:
            data["status"] = status

        if "description" in data and len(data["description"]) > 2000:
            raise ValidationError("Description cannot be more than 2000 characters")
        if "title" in data and len(data["title"]) > 200:
            raise ValidationError("Title cannot be more than 200 characters")
        if "seo_title" in data and len(data["seo_title"]) > 255:
            raise ValidationError("SEO title cannot be more than 255 characters")
        if "seo_description" in data and len(data["seo_description"]) > 500:
            raise ValidationError("SEO description cannot be more than 500 characters")

        return data

    def _get_storage(self) -> StorageService:
        if self.storage is None:
            raise InternalServerError("Storage service is not configured")
        return self.storage

    async def _discard(self, urls: List[str]) -> None:
        if urls and self.storage is not None:
            await self.storage.discard(urls)

    async def _release(self, urls: List[str]) -> None:
        """Delete replaced media, but only files this service stored itself."""
        if self.storage is not None:
            await self._discard([url for url in urls if url.startswith(self.storage.base_url + "/")])
