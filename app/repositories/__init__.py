"""
Repository layer for data access operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.blob import BlobBucket, get_blob_bucket
from app.repositories.favorite import FavoriteRepository
from app.repositories.inquiry import InquiryRepository
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "BlobBucket",
    "get_blob_bucket",
    "FavoriteRepository",
    "InquiryRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "UserRepository"
]
