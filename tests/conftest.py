"""
Test configuration and fixtures for the marketplace API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Configure the application before it is imported
UPLOAD_ROOT = tempfile.mkdtemp(prefix="homesphere-uploads-")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = UPLOAD_ROOT
os.environ.pop("ADMIN_EMAIL", None)

import io
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers
from fastapi import UploadFile

import app.models  # noqa: F401
from app.main import app
from app.database import Base, get_db
from app.models.user import User, UserRole
from app.models.property import Property, PropertyType, PropertyStatus
from app.models.inquiry import Inquiry, InquiryStatus
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository
from app.repositories.inquiry import InquiryRepository
from app.repositories.favorite import FavoriteRepository
from app.services.notifications import get_notifier
from app.utils.auth import create_access_token


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


class FakeNotifier:
    """Records emails instead of sending them."""

    def __init__(self, admin_email: Optional[str] = "inbox@homesphere.test"):
        self.admin_email = admin_email
        self.sent: List[Dict[str, str]] = []

    async def send_email(self, to: str, subject: str, html: str, sender: Optional[str] = None) -> dict:
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"sent": True, "message_id": f"<{uuid.uuid4().hex}@homesphere.test>"}


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False} if "sqlite" in TEST_DATABASE_URL else {}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
async def async_client(db_session: AsyncSession, notifier: FakeNotifier) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session and notifier overrides."""
    def override_get_db():
        return db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def inquiry_repository(db_session: AsyncSession) -> InquiryRepository:
    return InquiryRepository(db_session)


@pytest.fixture
def favorite_repository(db_session: AsyncSession) -> FavoriteRepository:
    return FavoriteRepository(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = None,
        name: str = "Test User",
        phone: Optional[str] = None,
        role: UserRole = UserRole.SELLER,
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
            "name": name,
            "phone": phone,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(
        owner_id: uuid.UUID,
        title: str = "Test Property",
        description: str = "A beautiful test property",
        property_type: PropertyType = PropertyType.HOUSE,
        status: PropertyStatus = PropertyStatus.AVAILABLE,
        price: Decimal = Decimal("1000000.00"),
        bedrooms: int = 3,
        bathrooms: int = 2,
        area: int = 1500,
        location: str = "Indiranagar, Bengaluru",
        images: Optional[List[str]] = None,
        model_url: Optional[str] = None,
        views: int = 0
    ) -> dict:
        """Create property data dictionary."""
        return {
            "owner_id": owner_id,
            "title": title,
            "description": description,
            "property_type": property_type,
            "status": status,
            "price": price,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "area": area,
            "location": location,
            "images": images if images is not None else ["https://cdn.example.com/a.jpg"],
            "model_url": model_url,
            "views": views
        }

    @staticmethod
    async def create_property(property_repo: PropertyRepository, owner_id: uuid.UUID, **kwargs) -> Property:
        """Create a test property in the database."""
        return await property_repo.create_property(PropertyFactory.create_property_data(owner_id, **kwargs))


class InquiryFactory:
    """Factory for creating test inquiries."""

    @staticmethod
    async def create_inquiry(
        inquiry_repo: InquiryRepository,
        property_id: uuid.UUID,
        name: str = "Anita Rao",
        email: str = "anita@example.com",
        message: str = "Is the price negotiable?",
        status: InquiryStatus = InquiryStatus.PENDING
    ) -> Inquiry:
        return await inquiry_repo.create({
            "property_id": property_id,
            "name": name,
            "email": email,
            "message": message,
            "status": status
        })


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header carrying a token for the user."""
    token = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


def image_part(name: str = "photo.jpg", content: bytes = b"\xff\xd8\xff\xe0fake-jpeg", content_type: str = "image/jpeg"):
    """Multipart file tuple for httpx."""
    return (name, content, content_type)


def make_upload(filename: str, content: bytes = b"data", content_type: str = "application/octet-stream") -> UploadFile:
    """In-memory UploadFile for service level tests."""
    return UploadFile(
        file=io.BytesIO(content),
        size=len(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


# Common test fixtures
@pytest.fixture
async def test_seller(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="seller@test.com",
        name="Test Seller",
        phone="+91 90000 11111",
        role=UserRole.SELLER
    )


@pytest.fixture
async def test_other_seller(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="other-seller@test.com",
        name="Other Seller",
        role=UserRole.SELLER
    )


@pytest.fixture
async def test_buyer(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="buyer@test.com",
        name="Test Buyer",
        role=UserRole.BUYER
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@test.com",
        name="Test Admin",
        role=UserRole.ADMIN
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@test.com",
        name="Suspended Buyer",
        role=UserRole.BUYER,
        is_active=False
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_seller: User) -> Property:
    return await PropertyFactory.create_property(
        property_repository,
        test_seller.id,
        title="Lake View House",
        images=["https://cdn.example.com/u1.jpg", "https://cdn.example.com/u2.jpg"]
    )
