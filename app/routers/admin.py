"""
Admin API endpoints: dashboard analytics, buyer moderation and listing status overrides.
Every route requires an active admin.
"""

from fastapi import APIRouter, Depends, Path, status
from typing import List
from uuid import UUID

from app.models.user import User
from app.services.admin import AdminService
from app.schemas.admin import AnalyticsResponse
from app.schemas.common import MessageResponse, StatusUpdate
from app.schemas.inquiry import InquiryResponse
from app.schemas.property import PropertyResponse, PropertyStatusResponse
from app.schemas.user import UserResponse, UserStatusResponse
from app.utils.dependencies import get_current_admin_user, get_admin_service
from app.schemas.error import get_crud_error_responses


router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    status_code=status.HTTP_200_OK,
    summary="Dashboard analytics",
    description="Counts, recent inquiries, top listings and trends for the admin's own properties.",
    responses=get_crud_error_responses()
)
async def get_analytics(
    admin: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> AnalyticsResponse:
    analytics = await admin_service.get_analytics(admin)
    return AnalyticsResponse.model_validate(analytics)


@router.get(
    "/buyers",
    response_model=List[UserResponse],
    status_code=status.HTTP_200_OK,
    summary="List buyers",
    responses=get_crud_error_responses()
)
async def list_buyers(
    admin: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> List[UserResponse]:
    buyers = await admin_service.get_buyers()
    return [UserResponse.model_validate(buyer.to_dict()) for buyer in buyers]


@router.put(
    "/buyers/{user_id}/toggle-status",
    response_model=UserStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Suspend or reactivate a user",
    responses=get_crud_error_responses()
)
async def toggle_user_status(
    user_id: UUID = Path(..., description="User ID"),
    admin: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> UserStatusResponse:
    """
    Flip a user's active flag.

    Raises:
        NotFoundError: If the user doesn't exist
        BadRequestError: If the user is an admin
    """
    user = await admin_service.toggle_user_status(user_id)
    return UserStatusResponse(
        message="User activated" if user.is_active else "User suspended",
        user=UserResponse.model_validate(user.to_dict())
    )


@router.delete(
    "/buyers/{user_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a user",
    responses=get_crud_error_responses()
)
async def delete_user(
    user_id: UUID = Path(..., description="User ID"),
    admin: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> MessageResponse:
    await admin_service.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")


@router.get(
    "/inquiries",
    response_model=List[InquiryResponse],
    status_code=status.HTTP_200_OK,
    summary="Inquiries on the admin's properties",
    responses=get_crud_error_responses()
)
async def list_admin_inquiries(
    admin: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> List[InquiryResponse]:
    inquiries = await admin_service.get_inquiries(admin)
    return [InquiryResponse.model_validate(inquiry.to_dict()) for inquiry in inquiries]


@router.put(
    "/properties/{property_id}/status",
    response_model=PropertyStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Override property status",
    description="Set the status of one of the admin's own properties.",
    responses=get_crud_error_responses()
)
async def update_property_status(
    payload: StatusUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    admin: User = Depends(get_current_admin_user),
    admin_service: AdminService = Depends(get_admin_service)
) -> PropertyStatusResponse:
    property_obj = await admin_service.update_property_status(property_id, payload.status, admin)
    return PropertyStatusResponse(
        message="Property status updated",
        property=PropertyResponse.model_validate(property_obj.to_dict())
    )
