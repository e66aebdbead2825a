"""
Property API endpoints: search, detail, similar listings, and multipart create/update.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Form, File, UploadFile
from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from app.models.user import User
from app.models.property import PropertyType
from app.repositories.property import PropertySearchFilters
from app.services.property import PropertyService
from app.services.seed import SeedService
from app.schemas.common import MessageResponse
from app.schemas.property import PropertyResponse
from app.utils.dependencies import (
    get_current_active_user,
    get_current_lister_user,
    get_property_service,
    get_seed_service
)
from app.utils.validators import ValidationUtils
from app.schemas.error import get_crud_error_responses, get_public_error_responses


router = APIRouter(prefix="/properties", tags=["Properties"])


def _to_response(properties, include_owner: bool = True) -> List[PropertyResponse]:
    return [PropertyResponse.model_validate(p.to_dict(include_owner=include_owner)) for p in properties]


@router.get(
    "",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="List properties",
    description="Search listings by text, price range, type and location. Results are not paginated.",
    responses=get_public_error_responses()
)
async def list_properties(
    search: Optional[str] = Query(None, description="Words matched against title, description and location"),
    min_price: Optional[str] = Query(None, alias="minPrice", description="Minimum price, inclusive"),
    max_price: Optional[str] = Query(None, alias="maxPrice", description="Maximum price, inclusive"),
    property_type: Optional[str] = Query(None, alias="propertyType", description="Property type"),
    location: Optional[str] = Query(None, description="Case-insensitive location substring"),
    sort: Optional[str] = Query(None, description="price-asc, price-desc or newest"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    """
    List properties matching every given filter.

    Returns:
        Matching properties with their owner
    """
    filters = PropertySearchFilters(
        search_text=search.strip() if search and search.strip() else None,
        min_price=ValidationUtils.validate_decimal(min_price, "minPrice", min_value=Decimal("0")),
        max_price=ValidationUtils.validate_decimal(max_price, "maxPrice", min_value=Decimal("0")),
        property_type=ValidationUtils.validate_enum(property_type, PropertyType, "propertyType"),
        location=location.strip() if location and location.strip() else None,
        sort=sort
    )

    properties = await property_service.list_properties(filters)
    return _to_response(properties)


@router.get(
    "/my/listings",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="Get my listings",
    description="Properties owned by the caller, newest first.",
    responses=get_crud_error_responses()
)
async def get_my_properties(
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_my_properties(current_user)
    return _to_response(properties, include_owner=False)


@router.post(
    "/my/seed",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="Seed demo listings",
    description="Create up to six featured demo listings for the caller. Requires seller or admin role.",
    responses=get_crud_error_responses()
)
async def seed_my_properties(
    current_user: User = Depends(get_current_lister_user),
    seed_service: SeedService = Depends(get_seed_service)
) -> List[PropertyResponse]:
    """
    Seed demo listings for the caller.

    Returns:
        The caller's full listing, newest first
    """
    properties = await seed_service.seed_listings(current_user)
    return _to_response(properties, include_owner=False)


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    description="Get a property with its owner's contact details. Each call counts one view.",
    responses=get_public_error_responses()
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Get detailed information about a specific property.

    Raises:
        NotFoundError: If property doesn't exist
    """
    property_obj = await property_service.get_property(property_id)
    return PropertyResponse.model_validate(property_obj.to_dict(include_owner_phone=True))


@router.get(
    "/{property_id}/similar",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="Get similar properties",
    description="Up to four properties of the same type priced within 20% of this one.",
    responses=get_public_error_responses()
)
async def get_similar_properties(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> List[PropertyResponse]:
    properties = await property_service.get_similar_properties(property_id)
    return [PropertyResponse.model_validate(p.to_dict(include_owner_phone=True)) for p in properties]


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing from a multipart form with images and an optional 3D model. "
                "Requires seller or admin role.",
    responses=get_crud_error_responses()
)
async def create_property(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    bedrooms: Optional[str] = Form(None),
    bathrooms: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    property_type: Optional[str] = Form(None, alias="propertyType"),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    seo_title: Optional[str] = Form(None, alias="seoTitle"),
    seo_description: Optional[str] = Form(None, alias="seoDescription"),
    images: Optional[List[UploadFile]] = File(None, description="Up to 10 jpeg/jpg/png/gif/webp images"),
    model: Optional[List[UploadFile]] = File(None, description="One .glb or .gltf model"),
    current_user: User = Depends(get_current_lister_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Create a new property listing owned by the caller.

    Raises:
        ValidationError: If required fields or images are missing
        FileUploadError: If an upload is rejected
    """
    form = {
        "title": title,
        "description": description,
        "price": price,
        "location": location,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "area": area,
        "propertyType": property_type,
        "latitude": latitude,
        "longitude": longitude,
        "seo_title": seo_title,
        "seo_description": seo_description,
    }
    uploads = {"images": images or [], "model": model or []}

    property_obj = await property_service.create_property(form, uploads, current_user)
    return PropertyResponse.model_validate(property_obj.to_dict())


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Partially update a listing. Only the owner or an admin can update.",
    responses=get_crud_error_responses()
)
async def update_property(
    property_id: UUID = Path(..., description="Property ID"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    bedrooms: Optional[str] = Form(None),
    bathrooms: Optional[str] = Form(None),
    area: Optional[str] = Form(None),
    property_type: Optional[str] = Form(None, alias="propertyType"),
    status_value: Optional[str] = Form(None, alias="status"),
    latitude: Optional[str] = Form(None),
    longitude: Optional[str] = Form(None),
    seo_title: Optional[str] = Form(None, alias="seoTitle"),
    seo_description: Optional[str] = Form(None, alias="seoDescription"),
    images_to_delete: Optional[str] = Form(None, alias="imagesToDelete", description="JSON array of image URLs"),
    delete_model: Optional[str] = Form(None, alias="deleteModel", description='"true" removes the model'),
    new_images: Optional[List[UploadFile]] = File(None, alias="newImages"),
    new_model: Optional[List[UploadFile]] = File(None, alias="newModel"),
    current_user: User = Depends(get_current_lister_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyResponse:
    """
    Update property details and media.

    Raises:
        NotFoundError: If property doesn't exist
        InsufficientPermissionsError: If the caller is neither owner nor admin
        ValidationError: If update data is invalid
    """
    form = {
        "title": title,
        "description": description,
        "price": price,
        "location": location,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "area": area,
        "propertyType": property_type,
        "status": status_value,
        "latitude": latitude,
        "longitude": longitude,
        "seo_title": seo_title,
        "seo_description": seo_description,
        "imagesToDelete": images_to_delete,
        "deleteModel": delete_model,
    }
    uploads = {}
    if new_images:
        uploads["newImages"] = new_images
    if new_model:
        uploads["newModel"] = new_model

    updated = await property_service.update_property(property_id, form, uploads, current_user)
    return PropertyResponse.model_validate(updated.to_dict())


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete property",
    description="Delete a listing with its inquiries and favorites. Only the owner or an admin can delete.",
    responses=get_crud_error_responses()
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    property_service: PropertyService = Depends(get_property_service)
) -> MessageResponse:
    await property_service.delete_property(property_id, current_user)
    return MessageResponse(message="Property removed")
