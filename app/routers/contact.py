"""
Public contact form endpoint.
"""

from fastapi import APIRouter, Depends, status

from app.services.inquiry import ContactService
from app.schemas.common import MessageResponse
from app.schemas.inquiry import ContactRequest
from app.utils.dependencies import get_contact_service
from app.schemas.error import get_error_responses


router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Send a contact message",
    description="Forward a message to the admin mailbox when one is configured.",
    responses=get_error_responses(400, 500)
)
async def submit_contact(
    payload: ContactRequest,
    contact_service: ContactService = Depends(get_contact_service)
) -> MessageResponse:
    message = await contact_service.submit_contact(payload.model_dump())
    return MessageResponse(message=message)
