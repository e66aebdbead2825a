"""
Favorites API endpoints. All routes act on the calling buyer's own favorites.
"""

from fastapi import APIRouter, Depends, Path, status
from typing import List
from uuid import UUID

from app.models.user import User
from app.services.favorite import FavoriteService
from app.schemas.favorite import FavoriteIdsResponse, FavoriteCheckResponse
from app.schemas.property import PropertyResponse
from app.utils.dependencies import get_current_buyer_user, get_favorite_service
from app.schemas.error import get_crud_error_responses


router = APIRouter(prefix="/favorites", tags=["Favorites"])


@router.get(
    "",
    response_model=List[PropertyResponse],
    status_code=status.HTTP_200_OK,
    summary="List favorites",
    description="The caller's favorite properties in the order they were added.",
    responses=get_crud_error_responses()
)
async def list_favorites(
    current_user: User = Depends(get_current_buyer_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> List[PropertyResponse]:
    properties = await favorite_service.get_favorites(current_user)
    return [PropertyResponse.model_validate(p.to_dict()) for p in properties]


@router.get(
    "/check/{property_id}",
    response_model=FavoriteCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Check favorite",
    responses=get_crud_error_responses()
)
async def check_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_buyer_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteCheckResponse:
    is_favorite = await favorite_service.is_favorite(property_id, current_user)
    return FavoriteCheckResponse(is_favorite=is_favorite)


@router.post(
    "/{property_id}",
    response_model=FavoriteIdsResponse,
    status_code=status.HTTP_200_OK,
    summary="Add favorite",
    description="Add a property to the caller's favorites.",
    responses=get_crud_error_responses()
)
async def add_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_buyer_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteIdsResponse:
    """
    Add a property to favorites.

    Raises:
        NotFoundError: If the property doesn't exist
        BadRequestError: If the property is already a favorite
    """
    favorite_ids = await favorite_service.add_favorite(property_id, current_user)
    return FavoriteIdsResponse(
        message="Property added to favorites",
        favorites=[str(favorite_id) for favorite_id in favorite_ids]
    )


@router.delete(
    "/{property_id}",
    response_model=FavoriteIdsResponse,
    status_code=status.HTTP_200_OK,
    summary="Remove favorite",
    description="Remove a property from the caller's favorites. Removing a non-favorite is not an error.",
    responses=get_crud_error_responses()
)
async def remove_favorite(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_buyer_user),
    favorite_service: FavoriteService = Depends(get_favorite_service)
) -> FavoriteIdsResponse:
    favorite_ids = await favorite_service.remove_favorite(property_id, current_user)
    return FavoriteIdsResponse(
        message="Property removed from favorites",
        favorites=[str(favorite_id) for favorite_id in favorite_ids]
    )
