"""
Inquiry API endpoints: public submission and owner/admin management.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Path, status
from typing import List
from uuid import UUID

from app.models.user import User
from app.services.inquiry import InquiryService
from app.schemas.common import StatusUpdate
from app.schemas.inquiry import InquiryCreate, InquiryResponse, InquirySubmitResponse
from app.utils.dependencies import get_current_active_user, get_inquiry_service
from app.schemas.error import get_crud_error_responses, get_public_error_responses


router = APIRouter(prefix="/inquiry", tags=["Inquiries"])


@router.post(
    "",
    response_model=InquirySubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit inquiry",
    description="Send a question about a property. The owner and the admin mailbox are notified by email.",
    responses=get_public_error_responses()
)
async def submit_inquiry(
    payload: InquiryCreate,
    background_tasks: BackgroundTasks,
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> InquirySubmitResponse:
    """
    Submit a public inquiry.

    Raises:
        ValidationError: If required fields are missing or malformed
        NotFoundError: If the property doesn't exist
    """
    inquiry = await inquiry_service.submit_inquiry(payload.model_dump(by_alias=True), background_tasks)
    return InquirySubmitResponse(
        message="Inquiry submitted successfully",
        inquiry=InquiryResponse.model_validate(inquiry.to_dict())
    )


@router.get(
    "",
    response_model=List[InquiryResponse],
    status_code=status.HTTP_200_OK,
    summary="List inquiries",
    description="Admins see every inquiry; other users see inquiries on their own properties.",
    responses=get_crud_error_responses()
)
async def list_inquiries(
    current_user: User = Depends(get_current_active_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> List[InquiryResponse]:
    inquiries = await inquiry_service.get_inquiries(current_user)
    return [InquiryResponse.model_validate(inquiry.to_dict()) for inquiry in inquiries]


@router.get(
    "/property/{property_id}",
    response_model=List[InquiryResponse],
    status_code=status.HTTP_200_OK,
    summary="List inquiries for a property",
    description="Inquiries on one property, newest first. Owner or admin only.",
    responses=get_crud_error_responses()
)
async def list_property_inquiries(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_active_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> List[InquiryResponse]:
    inquiries = await inquiry_service.get_property_inquiries(property_id, current_user)
    return [InquiryResponse.model_validate(inquiry.to_dict()) for inquiry in inquiries]


@router.put(
    "/{inquiry_id}",
    response_model=InquiryResponse,
    status_code=status.HTTP_200_OK,
    summary="Update inquiry status",
    description="Set status to pending, contacted or closed. Owner or admin only.",
    responses=get_crud_error_responses()
)
async def update_inquiry_status(
    payload: StatusUpdate,
    inquiry_id: UUID = Path(..., description="Inquiry ID"),
    current_user: User = Depends(get_current_active_user),
    inquiry_service: InquiryService = Depends(get_inquiry_service)
) -> InquiryResponse:
    """
    Update the status of an inquiry.

    Raises:
        ValidationError: If the status is invalid
        NotFoundError: If the inquiry doesn't exist
    """
    inquiry = await inquiry_service.update_inquiry_status(inquiry_id, payload.status, current_user)
    return InquiryResponse.model_validate(inquiry.to_dict())
