"""
Pydantic schemas for the admin dashboard.
"""

from pydantic import BaseModel, Field
from typing import List
from app.schemas.inquiry import InquiryResponse
from app.schemas.property import PropertyResponse


class AnalyticsOverview(BaseModel):
    """Headline counts. All but total_buyers cover the admin's own listings."""

    total_properties: int = Field(..., ge=0)
    total_buyers: int = Field(..., ge=0)
    total_inquiries: int = Field(..., ge=0)
    available_properties: int = Field(..., ge=0)
    pending_properties: int = Field(..., ge=0)
    sold_properties: int = Field(..., ge=0)


class TypeCount(BaseModel):
    property_type: str = Field(..., examples=["villa"])
    count: int


class MonthlyCount(BaseModel):
    year: int = Field(..., examples=[2024])
    month: int = Field(..., ge=1, le=12)
    count: int


class AnalyticsResponse(BaseModel):
    """Admin dashboard payload."""

    overview: AnalyticsOverview
    recent_inquiries: List[InquiryResponse]
    top_properties: List[PropertyResponse]
    properties_by_type: List[TypeCount]
    monthly_stats: List[MonthlyCount] = Field(..., description="Listings created per month, oldest first")
