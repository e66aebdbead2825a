"""
Pydantic schemas for inquiry and contact-form requests and responses.
Request fields are optional so that missing values are reported with the
service's own messages.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
from app.models.inquiry import InquiryStatus
from app.schemas.user import OwnerSummary


class InquiryCreate(BaseModel):
    """Public inquiry submission."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, examples=["Anita Rao"])
    email: Optional[str] = Field(None, examples=["anita@example.com"])
    phone: Optional[str] = Field(None, examples=["+91 98765 43210"])
    message: Optional[str] = Field(None, examples=["Is the price negotiable?"])
    property_id: Optional[str] = Field(None, alias="propertyId", description="Property being asked about")


class InquiryPropertySummary(BaseModel):
    """Property fields joined into inquiry responses."""

    id: str
    title: str
    price: float
    images: List[str] = Field(default_factory=list)
    owner: Optional[OwnerSummary] = None


class InquiryResponse(BaseModel):
    """Stored inquiry."""

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    status: InquiryStatus
    property_id: str
    property: Optional[InquiryPropertySummary] = None
    created_at: datetime
    updated_at: datetime


class InquirySubmitResponse(BaseModel):
    """Result of a public inquiry submission."""

    message: str = Field(..., examples=["Inquiry submitted successfully"])
    inquiry: InquiryResponse


class ContactRequest(BaseModel):
    """Public contact-form message."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
