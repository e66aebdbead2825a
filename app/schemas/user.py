"""
Pydantic schemas for user responses and moderation results.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from app.models.user import UserRole


class OwnerSummary(BaseModel):
    """Owner fields joined into property responses."""

    id: str = Field(..., description="Owner's unique identifier")
    name: str = Field(..., description="Owner's display name", examples=["Priya Sharma"])
    email: str = Field(..., description="Owner's email address", examples=["priya@example.com"])
    phone: Optional[str] = Field(None, description="Owner's phone, on detail views only")


class UserResponse(BaseModel):
    """User response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(
        ...,
        description="User's unique identifier",
        examples=["123e4567-e89b-12d3-a456-426614174000"]
    )

    email: str = Field(
        ...,
        description="User's email address",
        examples=["buyer@example.com"]
    )

    name: str = Field(
        ...,
        description="User's display name",
        examples=["Rahul Verma"]
    )

    phone: Optional[str] = Field(None, description="User's phone number")

    role: UserRole = Field(
        ...,
        description="User's role",
        examples=["buyer"]
    )

    is_active: bool = Field(
        ...,
        description="False while the account is suspended",
        examples=[True]
    )

    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class UserStatusResponse(BaseModel):
    """Result of suspending or reactivating a user."""

    message: str = Field(..., examples=["User suspended"])
    user: UserResponse
