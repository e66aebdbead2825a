"""
Tests for model validation, permission helpers and serialization.
"""

import pytest
import uuid
from decimal import Decimal

from app.models.user import User, UserRole
from app.models.property import Property, PropertyType, PropertyStatus
from app.models.inquiry import Inquiry
from tests.conftest import PropertyFactory, InquiryFactory


class TestUserModel:
    """Test User model helpers."""

    def test_validate_email_format_normalizes(self):
        assert User.validate_email_format("Priya.Sharma@Example.COM") == "priya.sharma@example.com"

    def test_validate_email_format_invalid(self):
        with pytest.raises(ValueError, match="Invalid email format"):
            User.validate_email_format("not-an-email")

    def test_role_helpers(self):
        admin = User(email="a@example.com", name="A", role=UserRole.ADMIN)
        seller = User(email="s@example.com", name="S", role=UserRole.SELLER)
        buyer = User(email="b@example.com", name="B", role=UserRole.BUYER)

        assert admin.is_admin and admin.can_list_properties
        assert seller.can_list_properties and not seller.is_admin
        assert buyer.is_buyer and not buyer.can_list_properties

    def test_can_manage_property(self):
        owner_id = uuid.uuid4()
        owner = User(id=owner_id, email="o@example.com", name="O", role=UserRole.SELLER)
        stranger = User(id=uuid.uuid4(), email="x@example.com", name="X", role=UserRole.SELLER)
        admin = User(id=uuid.uuid4(), email="a@example.com", name="A", role=UserRole.ADMIN)

        assert owner.can_manage_property(owner_id)
        assert not stranger.can_manage_property(owner_id)
        assert admin.can_manage_property(owner_id)

    def test_to_summary_phone_only_on_request(self):
        user = User(id=uuid.uuid4(), email="o@example.com", name="Owner", phone="123", role=UserRole.SELLER)

        assert "phone" not in user.to_summary()
        assert user.to_summary(include_phone=True)["phone"] == "123"


class TestPropertyModel:
    """Test Property validation and serialization."""

    def test_negative_price_rejected(self):
        listing = Property(title="T", description="D", price=Decimal("-1"), location="L")
        with pytest.raises(ValueError, match="price cannot be negative"):
            listing.validate_all()

    def test_negative_counts_rejected(self):
        listing = Property(title="T", description="D", price=Decimal("10"), location="L", bathrooms=-2)
        with pytest.raises(ValueError, match="Bathrooms cannot be negative"):
            listing.validate_all()

    def test_description_length_limit(self):
        listing = Property(title="T", description="x" * 2001, price=Decimal("10"), location="L")
        with pytest.raises(ValueError, match="2000 characters"):
            listing.validate_all()

    @pytest.mark.asyncio
    async def test_defaults_and_to_dict(self, property_repository, test_seller):
        listing = await property_repository.create_property({
            "owner_id": test_seller.id,
            "title": "Plot",
            "description": "Corner plot",
            "price": Decimal("2500000"),
            "location": "Narsingi",
            "images": ["https://cdn.example.com/p.jpg"],
        })

        data = listing.to_dict()
        assert data["property_type"] == PropertyType.HOUSE.value
        assert data["status"] == PropertyStatus.AVAILABLE.value
        assert data["views"] == 0
        assert data["featured"] is False
        assert data["bedrooms"] == 0
        assert data["price"] == 2500000.0
        assert data["owner"] == {"id": str(test_seller.id), "name": "Test Seller", "email": "seller@test.com"}

    @pytest.mark.asyncio
    async def test_to_dict_owner_phone(self, test_property, test_seller):
        data = test_property.to_dict(include_owner_phone=True)
        assert data["owner"]["phone"] == test_seller.phone

        assert "owner" not in test_property.to_dict(include_owner=False)


class TestInquiryModel:
    """Test Inquiry helpers."""

    @pytest.mark.parametrize("email,expected", [
        ("anita@example.com", True),
        ("a@b.co", True),
        ("anita@example", False),
        ("anita example.com", False),
        ("", False),
    ])
    def test_is_valid_email(self, email, expected):
        assert Inquiry.is_valid_email(email) is expected

    @pytest.mark.asyncio
    async def test_to_dict_includes_property_summary(self, inquiry_repository, test_property, test_seller):
        inquiry = await InquiryFactory.create_inquiry(inquiry_repository, test_property.id)

        data = inquiry.to_dict()
        assert data["status"] == "pending"
        assert data["property"]["id"] == str(test_property.id)
        assert data["property"]["title"] == "Lake View House"
        assert data["property"]["images"] == test_property.images
        assert data["property"]["owner"]["email"] == test_seller.email
