"""
Pydantic schemas for property responses.
Create and update requests are multipart forms parsed in the router.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.models.property import PropertyType, PropertyStatus
from app.schemas.user import OwnerSummary


class PropertyResponse(BaseModel):
    """Property listing as returned by the API."""

    id: str = Field(..., description="Property's unique identifier")

    title: str = Field(
        ...,
        description="Property listing title",
        examples=["Luxury Sea-Facing Apartment"]
    )

    description: str = Field(..., description="Detailed property description")

    price: float = Field(
        ...,
        ge=0,
        description="Asking price",
        examples=[27000000]
    )

    location: str = Field(
        ...,
        description="Free-text location",
        examples=["Bandra West, Mumbai, Maharashtra"]
    )

    latitude: Optional[float] = Field(None, description="Latitude coordinate")
    longitude: Optional[float] = Field(None, description="Longitude coordinate")

    images: List[str] = Field(default_factory=list, description="Image URLs in display order")
    model_url: Optional[str] = Field(None, description="URL of the .glb/.gltf 3D model")

    bedrooms: int = Field(0, ge=0, description="Number of bedrooms")
    bathrooms: int = Field(0, ge=0, description="Number of bathrooms")
    area: int = Field(0, ge=0, description="Area in square feet")

    property_type: PropertyType = Field(..., description="Property type", examples=["apartment"])
    status: PropertyStatus = Field(..., description="Sale status", examples=["available"])

    featured: bool = Field(False, description="Highlighted on the home page")
    views: int = Field(0, ge=0, description="Number of detail views")

    seo_title: Optional[str] = None
    seo_description: Optional[str] = None

    owner_id: str = Field(..., description="Owning user's identifier")
    owner: Optional[OwnerSummary] = Field(None, description="Owning user")

    created_at: datetime
    updated_at: datetime


class PropertyStatusResponse(BaseModel):
    """Result of an admin status override."""

    message: str = Field(..., examples=["Property status updated"])
    property: PropertyResponse
