"""
Service layer for business logic implementation.
Contains services for listings, storage, inquiries, favorites, admin and error handling.
"""

from .auth import AuthService
from .admin import AdminService
from .error_handler import ErrorHandlerService
from .favorite import FavoriteService
from .inquiry import InquiryService, ContactService
from .notifications import Notifier, get_notifier
from .property import PropertyService
from .seed import SeedService
from .storage import StorageService, StorageBackend

__all__ = [
    "AuthService",
    "AdminService",
    "ErrorHandlerService",
    "FavoriteService",
    "InquiryService",
    "ContactService",
    "Notifier",
    "get_notifier",
    "PropertyService",
    "SeedService",
    "StorageService",
    "StorageBackend"
]
