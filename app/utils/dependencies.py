"""
FastAPI dependency injection utilities for authentication, roles and services.
Provides reusable dependencies for route protection and service construction.
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db
from app.models.user import User, UserRole
from app.services.admin import AdminService
from app.services.auth import AuthService
from app.services.favorite import FavoriteService
from app.services.inquiry import InquiryService, ContactService
from app.services.notifications import Notifier, get_notifier
from app.services.property import PropertyService
from app.services.seed import SeedService
from app.services.storage import StorageService, select_storage_backend
from app.utils.exceptions import (
    UnauthorizedError,
    InactiveUserError,
    ForbiddenError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_storage_service(request: Request, db: AsyncSession = Depends(get_db)) -> StorageService:
    """
    Get a storage service bound to the configured backend.

    Args:
        request: Current request, used for the public base URL
        db: Database session, used by the blob store backend

    Returns:
        StorageService instance
    """
    backend_cls = select_storage_backend()
    base_url = settings.public_base_url or str(request.base_url)
    return StorageService(backend_cls(db), base_url)


async def get_property_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service)
) -> PropertyService:
    """
    Get property service instance.

    Args:
        db: Database session
        storage: Storage service for listing media

    Returns:
        PropertyService instance
    """
    return PropertyService(db, storage)


async def get_seed_service(db: AsyncSession = Depends(get_db)) -> SeedService:
    return SeedService(db)


async def get_inquiry_service(
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier)
) -> InquiryService:
    """
    Get inquiry service instance.

    Args:
        db: Database session
        notifier: Process-wide email notifier

    Returns:
        InquiryService instance
    """
    return InquiryService(db, notifier)


async def get_contact_service(notifier: Notifier = Depends(get_notifier)) -> ContactService:
    return ContactService(notifier)


async def get_favorite_service(db: AsyncSession = Depends(get_db)) -> FavoriteService:
    return FavoriteService(db)


async def get_admin_service(db: AsyncSession = Depends(get_db)) -> AdminService:
    return AdminService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token provided, the token is invalid or the user is unknown
        TokenExpiredError: If token is expired
    """
    if not credentials:
        raise UnauthorizedError()

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current active user (additional check for user status).

    Args:
        current_user: Current user from token

    Returns:
        Active User object

    Raises:
        InactiveUserError: If user account is suspended
    """
    if not current_user.is_active:
        raise InactiveUserError()

    return current_user


async def get_current_admin_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Get current user with admin role.

    Raises:
        ForbiddenError: If user is not an admin
    """
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenError("Access denied. Admin only.")

    return current_user


async def get_current_buyer_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Get current user with buyer role.

    Raises:
        ForbiddenError: If user is not a buyer
    """
    if current_user.role != UserRole.BUYER:
        raise ForbiddenError("Access denied. Buyers only.")

    return current_user


async def get_current_lister_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """
    Get current user allowed to publish listings (seller or admin).

    Raises:
        ForbiddenError: If user is a buyer
    """
    if not current_user.can_list_properties:
        raise ForbiddenError("Access denied. Sellers or Admins only.")

    return current_user
