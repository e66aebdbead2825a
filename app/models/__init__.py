"""
Database models for the real estate marketplace.
Includes User, Property, Inquiry, Favorite and the chunked blob store tables.
"""

from app.models.user import User, UserRole
from app.models.property import Property, PropertyType, PropertyStatus
from app.models.inquiry import Inquiry, InquiryStatus
from app.models.favorite import Favorite
from app.models.blob import BlobFile, BlobChunk

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "PropertyStatus",
    "Inquiry",
    "InquiryStatus",
    "Favorite",
    "BlobFile",
    "BlobChunk",
]
