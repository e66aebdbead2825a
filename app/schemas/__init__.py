"""
Pydantic schemas for request/response validation.
"""

# Shared schemas
from .common import MessageResponse, StatusUpdate

# User schemas
from .user import OwnerSummary, UserResponse, UserStatusResponse

# Property schemas
from .property import PropertyResponse, PropertyStatusResponse

# Inquiry schemas
from .inquiry import (
    InquiryCreate,
    InquiryPropertySummary,
    InquiryResponse,
    InquirySubmitResponse,
    ContactRequest
)

# Favorite schemas
from .favorite import FavoriteIdsResponse, FavoriteCheckResponse

# Admin schemas
from .admin import AnalyticsOverview, TypeCount, MonthlyCount, AnalyticsResponse

__all__ = [
    # Shared
    "MessageResponse",
    "StatusUpdate",

    # User
    "OwnerSummary",
    "UserResponse",
    "UserStatusResponse",

    # Property
    "PropertyResponse",
    "PropertyStatusResponse",

    # Inquiry
    "InquiryCreate",
    "InquiryPropertySummary",
    "InquiryResponse",
    "InquirySubmitResponse",
    "ContactRequest",

    # Favorite
    "FavoriteIdsResponse",
    "FavoriteCheckResponse",

    # Admin
    "AnalyticsOverview",
    "TypeCount",
    "MonthlyCount",
    "AnalyticsResponse"
]
