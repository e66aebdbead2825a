"""
Tests for service classes.
Covers listing business rules and media handling, inquiries, favorites,
admin moderation and demo seeding.
"""

import pytest
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from fastapi import BackgroundTasks

from app.models.inquiry import InquiryStatus
from app.models.property import PropertyType, PropertyStatus
from app.models.user import UserRole
from app.repositories.property import PropertySearchFilters
from app.services.admin import AdminService, months_back_start
from app.services.auth import AuthService
from app.services.favorite import FavoriteService
from app.services.inquiry import InquiryService, ContactService
from app.services.property import PropertyService, MISSING_FIELDS_MESSAGE
from app.services.seed import SeedService, DEMO_MODELS, SEED_COUNT
from app.services.storage import StorageService, LocalStorageBackend
from app.utils.auth import create_access_token
from app.utils.exceptions import (
    BadRequestError,
    FileUploadError,
    InsufficientPermissionsError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError
)
from app.utils.file_utils import FileStorage
from tests.conftest import FakeNotifier, PropertyFactory, InquiryFactory, UserFactory, make_upload

BASE_URL = "http://test"


def listing_form(**overrides) -> dict:
    form = {
        "title": "Family Home near Lake Park",
        "description": "Independent house with a private terrace",
        "price": "18500000",
        "location": "HSR Layout, Bengaluru",
        "bedrooms": "4",
        "bathrooms": "3",
        "area": "2400",
    }
    form.update(overrides)
    return form


def jpeg(name: str = "front.jpg"):
    return make_upload(name, b"\xff\xd8\xff\xe0jpeg-bytes", "image/jpeg")


@pytest.fixture
def file_storage(tmp_path) -> FileStorage:
    return FileStorage(tmp_path)


@pytest.fixture
def storage_service(db_session, file_storage) -> StorageService:
    return StorageService(LocalStorageBackend(db_session, file_storage=file_storage), BASE_URL)


@pytest.fixture
def property_service(db_session, storage_service) -> PropertyService:
    return PropertyService(db_session, storage_service)


def stored_path(file_storage: FileStorage, url: str):
    return file_storage.resolve_relative(url.split("/uploads/", 1)[1])


class TestAuthService:
    """Test bearer token resolution."""

    @pytest.mark.asyncio
    async def test_get_current_user(self, db_session, test_seller):
        token = create_access_token(test_seller.id, test_seller.email, test_seller.role)

        user = await AuthService(db_session).get_current_user(token)

        assert user.id == test_seller.id

    @pytest.mark.asyncio
    async def test_invalid_token(self, db_session):
        with pytest.raises(InvalidTokenError):
            await AuthService(db_session).get_current_user("not-a-jwt")

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session):
        token = create_access_token(uuid.uuid4(), "ghost@example.com", UserRole.BUYER)
        with pytest.raises(UnauthorizedError, match="user not found"):
            await AuthService(db_session).get_current_user(token)


class TestPropertyServiceCreate:
    """Test listing creation from multipart input."""

    @pytest.mark.asyncio
    async def test_create_property_success(self, property_service, file_storage, test_seller):
        listing = await property_service.create_property(
            listing_form(propertyType="Villa"),
            {"images": [jpeg("a.jpg"), jpeg("b.png")], "model": [make_upload("house.glb", b"glTF")]},
            test_seller
        )

        assert listing.owner_id == test_seller.id
        assert listing.property_type == PropertyType.VILLA
        assert listing.price == Decimal("18500000")
        assert listing.bedrooms == 4
        assert len(listing.images) == 2
        assert all(url.startswith(f"{BASE_URL}/uploads/images/img-") for url in listing.images)
        assert listing.model_url.startswith(f"{BASE_URL}/uploads/models/model-")
        assert listing.model_url.endswith(".glb")
        assert stored_path(file_storage, listing.images[0]).exists()

    @pytest.mark.asyncio
    async def test_create_property_defaults(self, property_service, test_seller):
        form = listing_form()
        for count_field in ("bedrooms", "bathrooms", "area"):
            form.pop(count_field)

        listing = await property_service.create_property(form, {"images": [jpeg()]}, test_seller)

        assert listing.property_type == PropertyType.HOUSE
        assert (listing.bedrooms, listing.bathrooms, listing.area) == (0, 0, 0)
        assert listing.model_url is None

    @pytest.mark.asyncio
    async def test_create_property_missing_fields(self, property_service, test_seller):
        with pytest.raises(ValidationError) as exc_info:
            await property_service.create_property(listing_form(price=""), {"images": [jpeg()]}, test_seller)

        assert exc_info.value.detail == MISSING_FIELDS_MESSAGE

    @pytest.mark.asyncio
    async def test_create_property_requires_image(self, property_service, test_seller):
        with pytest.raises(ValidationError, match="Please upload at least one image"):
            await property_service.create_property(listing_form(), {"images": []}, test_seller)

    @pytest.mark.asyncio
    async def test_create_property_invalid_numbers(self, property_service, test_seller):
        with pytest.raises(ValidationError, match="Price must be a valid number"):
            await property_service.create_property(listing_form(price="lots"), {"images": [jpeg()]}, test_seller)

        with pytest.raises(ValidationError, match="Bedrooms cannot be negative"):
            await property_service.create_property(listing_form(bedrooms="-1"), {"images": [jpeg()]}, test_seller)

        with pytest.raises(ValidationError, match="Invalid property type"):
            await property_service.create_property(
                listing_form(propertyType="castle"), {"images": [jpeg()]}, test_seller
            )

    @pytest.mark.asyncio
    async def test_create_property_rejected_upload_stores_nothing(self, property_service, file_storage, test_seller):
        with pytest.raises(FileUploadError):
            await property_service.create_property(
                listing_form(),
                {"images": [jpeg()], "model": [make_upload("house.obj", b"obj")]},
                test_seller
            )

        assert not any((file_storage.base_dir / "images").iterdir())


class TestPropertyServiceUpdate:
    """Test partial updates and media changes."""

    @pytest.mark.asyncio
    async def test_update_missing_property(self, property_service, test_seller):
        with pytest.raises(NotFoundError, match="Property not found"):
            await property_service.update_property(uuid.uuid4(), {"title": "X"}, {}, test_seller)

    @pytest.mark.asyncio
    async def test_update_requires_owner(self, property_service, test_property, test_other_seller):
        with pytest.raises(InsufficientPermissionsError, match="Not authorized to update this property"):
            await property_service.update_property(test_property.id, {"title": "Mine now"}, {}, test_other_seller)

    @pytest.mark.asyncio
    async def test_admin_can_update_any_property(self, property_service, test_property, test_admin):
        updated = await property_service.update_property(
            test_property.id, {"status": "pending", "price": "950000"}, {}, test_admin
        )

        assert updated.status == PropertyStatus.PENDING
        assert updated.price == Decimal("950000")
        assert updated.title == test_property.title

    @pytest.mark.asyncio
    async def test_images_to_delete(self, property_service, test_property, test_seller):
        updated = await property_service.update_property(
            test_property.id,
            {"imagesToDelete": '["https://cdn.example.com/u1.jpg"]'},
            {},
            test_seller
        )

        assert updated.images == ["https://cdn.example.com/u2.jpg"]

    @pytest.mark.asyncio
    async def test_new_images_are_appended(self, property_service, test_property, test_seller):
        updated = await property_service.update_property(
            test_property.id, {}, {"newImages": [jpeg("new.webp")]}, test_seller
        )

        assert updated.images[:2] == ["https://cdn.example.com/u1.jpg", "https://cdn.example.com/u2.jpg"]
        assert updated.images[2].startswith(f"{BASE_URL}/uploads/images/")
        assert updated.images[2].endswith(".webp")

    @pytest.mark.asyncio
    async def test_invalid_images_to_delete(self, property_service, test_property, test_seller):
        with pytest.raises(ValidationError, match="imagesToDelete must be a JSON array"):
            await property_service.update_property(test_property.id, {"imagesToDelete": "u1"}, {}, test_seller)

    @pytest.mark.asyncio
    async def test_removed_local_files_are_deleted(self, property_service, file_storage, test_seller):
        listing = await property_service.create_property(
            listing_form(),
            {"images": [jpeg("a.jpg"), jpeg("b.jpg")], "model": [make_upload("m.gltf", b"{}")]},
            test_seller
        )
        removed_image, kept_image = listing.images
        model_url = listing.model_url

        updated = await property_service.update_property(
            listing.id,
            {"imagesToDelete": f'["{removed_image}"]', "deleteModel": "true"},
            {},
            test_seller
        )

        assert updated.images == [kept_image]
        assert updated.model_url is None
        assert not stored_path(file_storage, removed_image).exists()
        assert not stored_path(file_storage, model_url).exists()

    @pytest.mark.asyncio
    async def test_new_model_replaces_model(self, property_service, property_repository, test_seller):
        listing = await PropertyFactory.create_property(
            property_repository, test_seller.id, model_url=DEMO_MODELS[0]
        )

        updated = await property_service.update_property(
            listing.id, {}, {"newModel": [make_upload("new.glb", b"glTF")]}, test_seller
        )

        assert updated.model_url != DEMO_MODELS[0]
        assert updated.model_url.startswith(f"{BASE_URL}/uploads/models/")


class TestPropertyServiceRead:
    """Test detail views, similar listings, search and deletion."""

    @pytest.mark.asyncio
    async def test_get_property_counts_views(self, property_service, test_property):
        assert (await property_service.get_property(test_property.id)).views == 1
        assert (await property_service.get_property(test_property.id)).views == 2

    @pytest.mark.asyncio
    async def test_get_property_not_found(self, property_service):
        with pytest.raises(NotFoundError):
            await property_service.get_property(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_similar_for_missing_property(self, property_service):
        with pytest.raises(NotFoundError):
            await property_service.get_similar_properties(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_and_my_properties(self, property_service, property_repository, test_seller, test_other_seller):
        mine = await PropertyFactory.create_property(property_repository, test_seller.id)
        await PropertyFactory.create_property(property_repository, test_other_seller.id)

        assert len(await property_service.list_properties(PropertySearchFilters())) == 2
        assert [p.id for p in await property_service.get_my_properties(test_seller)] == [mine.id]

    @pytest.mark.asyncio
    async def test_delete_requires_owner(self, property_service, test_property, test_buyer):
        with pytest.raises(InsufficientPermissionsError, match="delete this property"):
            await property_service.delete_property(test_property.id, test_buyer)

    @pytest.mark.asyncio
    async def test_delete_property(self, property_service, property_repository, test_property, test_seller):
        await property_service.delete_property(test_property.id, test_seller)

        assert await property_repository.get_by_id(test_property.id) is None


class TestInquiryService:
    """Test inquiry submission, notification and management."""

    @pytest.fixture
    def notifier(self) -> FakeNotifier:
        return FakeNotifier(admin_email="admin-inbox@homesphere.test")

    @pytest.fixture
    def inquiry_service(self, db_session, notifier) -> InquiryService:
        return InquiryService(db_session, notifier)

    def payload(self, property_id, **overrides) -> dict:
        data = {
            "name": "Anita Rao",
            "email": "anita@example.com",
            "phone": "+91 98765 43210",
            "message": "Is the price negotiable?",
            "propertyId": str(property_id),
        }
        data.update(overrides)
        return data

    @pytest.mark.asyncio
    async def test_submit_inquiry_notifies_owner_and_admin(self, inquiry_service, notifier, test_property, test_seller):
        background_tasks = BackgroundTasks()

        inquiry = await inquiry_service.submit_inquiry(self.payload(test_property.id), background_tasks)

        assert inquiry.status == InquiryStatus.PENDING
        assert inquiry.property_id == test_property.id
        assert notifier.sent == []

        await background_tasks()

        assert [email["to"] for email in notifier.sent] == [test_seller.email, "admin-inbox@homesphere.test"]
        assert notifier.sent[0]["subject"] == "New inquiry for: Lake View House"
        assert notifier.sent[1]["subject"] == "[Admin Copy] New inquiry for: Lake View House"
        assert "Is the price negotiable?" in notifier.sent[0]["html"]

    @pytest.mark.asyncio
    async def test_notification_escapes_html(self, inquiry_service, notifier):
        await inquiry_service.notify_inquiry("Villa", "owner@example.com", "<b>Eve</b>", "eve@example.com", None, "<script>")

        assert "<script>" not in notifier.sent[0]["html"]
        assert "&lt;b&gt;Eve&lt;/b&gt;" in notifier.sent[0]["html"]

    @pytest.mark.asyncio
    async def test_submit_inquiry_validation(self, inquiry_service, test_property):
        with pytest.raises(ValidationError, match="Missing required fields: message"):
            await inquiry_service.submit_inquiry(self.payload(test_property.id, message=""), BackgroundTasks())

        with pytest.raises(ValidationError, match="Please provide a valid email"):
            await inquiry_service.submit_inquiry(self.payload(test_property.id, email="anita@"), BackgroundTasks())

        with pytest.raises(ValidationError, match="Message cannot be more than 1000 characters"):
            await inquiry_service.submit_inquiry(self.payload(test_property.id, message="x" * 1001), BackgroundTasks())

        with pytest.raises(ValidationError, match="Invalid propertyId"):
            await inquiry_service.submit_inquiry(self.payload("not-a-uuid"), BackgroundTasks())

    @pytest.mark.asyncio
    async def test_submit_inquiry_unknown_property(self, inquiry_service):
        with pytest.raises(NotFoundError, match="Property not found"):
            await inquiry_service.submit_inquiry(self.payload(uuid.uuid4()), BackgroundTasks())

    @pytest.mark.asyncio
    async def test_property_inquiries_permissions(
        self, inquiry_service, inquiry_repository, test_property, test_seller, test_other_seller, test_admin
    ):
        await InquiryFactory.create_inquiry(inquiry_repository, test_property.id)

        assert len(await inquiry_service.get_property_inquiries(test_property.id, test_seller)) == 1
        assert len(await inquiry_service.get_property_inquiries(test_property.id, test_admin)) == 1
        with pytest.raises(InsufficientPermissionsError, match="view these inquiries"):
            await inquiry_service.get_property_inquiries(test_property.id, test_other_seller)

    @pytest.mark.asyncio
    async def test_get_inquiries_scope(
        self, inquiry_service, inquiry_repository, property_repository, test_property, test_other_seller, test_admin
    ):
        other = await PropertyFactory.create_property(property_repository, test_other_seller.id)
        await InquiryFactory.create_inquiry(inquiry_repository, test_property.id)
        await InquiryFactory.create_inquiry(inquiry_repository, other.id)

        assert len(await inquiry_service.get_inquiries(test_other_seller)) == 1
        assert len(await inquiry_service.get_inquiries(test_admin)) == 2

    @pytest.mark.asyncio
    async def test_update_inquiry_status(
        self, inquiry_service, inquiry_repository, test_property, test_seller, test_other_seller
    ):
        inquiry = await InquiryFactory.create_inquiry(inquiry_repository, test_property.id)

        updated = await inquiry_service.update_inquiry_status(inquiry.id, "contacted", test_seller)
        assert updated.status == InquiryStatus.CONTACTED

        with pytest.raises(ValidationError, match="Invalid status"):
            await inquiry_service.update_inquiry_status(inquiry.id, "archived", test_seller)

        with pytest.raises(InsufficientPermissionsError, match="update this inquiry"):
            await inquiry_service.update_inquiry_status(inquiry.id, "closed", test_other_seller)

        with pytest.raises(NotFoundError, match="Inquiry not found"):
            await inquiry_service.update_inquiry_status(uuid.uuid4(), "closed", test_seller)


class TestContactService:
    """Test the contact form relay."""

    @pytest.mark.asyncio
    async def test_contact_without_admin_email(self):
        notifier = FakeNotifier(admin_email=None)
        message = await ContactService(notifier).submit_contact(
            {"name": "Ravi", "email": "ravi@example.com", "message": "Hello"}
        )

        assert message == "Message received (email not configured)"
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_contact_forwards_to_admin(self):
        notifier = FakeNotifier(admin_email="admin-inbox@homesphere.test")
        message = await ContactService(notifier).submit_contact(
            {"name": "Ravi", "email": "ravi@example.com", "phone": "12345", "message": "Hello"}
        )

        assert message == "Message sent successfully"
        assert notifier.sent[0]["to"] == "admin-inbox@homesphere.test"
        assert notifier.sent[0]["subject"] == "New contact message from Ravi"
        assert "12345" in notifier.sent[0]["html"]

    @pytest.mark.asyncio
    async def test_contact_missing_fields(self):
        with pytest.raises(ValidationError, match="Missing required fields"):
            await ContactService(FakeNotifier()).submit_contact({"name": "Ravi", "message": "Hello"})


class TestFavoriteService:
    """Test buyer favorites."""

    @pytest.mark.asyncio
    async def test_add_and_remove(self, db_session, test_property, test_buyer):
        service = FavoriteService(db_session)

        assert await service.add_favorite(test_property.id, test_buyer) == [test_property.id]
        assert await service.is_favorite(test_property.id, test_buyer) is True
        assert [p.id for p in await service.get_favorites(test_buyer)] == [test_property.id]

        assert await service.remove_favorite(test_property.id, test_buyer) == []
        assert await service.remove_favorite(test_property.id, test_buyer) == []

    @pytest.mark.asyncio
    async def test_add_duplicate(self, db_session, test_property, test_buyer):
        service = FavoriteService(db_session)
        await service.add_favorite(test_property.id, test_buyer)

        with pytest.raises(BadRequestError, match="Property already in favorites"):
            await service.add_favorite(test_property.id, test_buyer)

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_add(self, db_session, test_property, test_buyer, monkeypatch):
        buyer_id, property_id = test_buyer.id, test_property.id
        service = FavoriteService(db_session)
        await service.add_favorite(property_id, test_buyer)

        async def not_yet_favorite(user_id, prop_id):
            return False

        # Both requests pass the membership check; the second insert hits the unique constraint
        monkeypatch.setattr(service.favorite_repo, "is_favorite", not_yet_favorite)

        with pytest.raises(BadRequestError, match="Property already in favorites"):
            await service.add_favorite(property_id, test_buyer)

        assert await service.favorite_repo.get_favorite_ids(buyer_id) == [property_id]

    @pytest.mark.asyncio
    async def test_add_missing_property(self, db_session, test_buyer):
        with pytest.raises(NotFoundError):
            await FavoriteService(db_session).add_favorite(uuid.uuid4(), test_buyer)


class TestAdminService:
    """Test analytics and moderation."""

    def test_months_back_start(self):
        now = datetime(2025, 3, 15, 10, 30, tzinfo=timezone.utc)

        assert months_back_start(now, 6) == datetime(2024, 9, 1, tzinfo=timezone.utc)
        assert months_back_start(now, 0) == datetime(2025, 3, 1, tzinfo=timezone.utc)
        assert months_back_start(now, 2) == datetime(2025, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_analytics_scoped_to_admin(
        self, db_session, property_repository, inquiry_repository, test_admin, test_seller, test_buyer
    ):
        own = await PropertyFactory.create_property(
            property_repository, test_admin.id, property_type=PropertyType.VILLA, views=12
        )
        await PropertyFactory.create_property(
            property_repository, test_admin.id, property_type=PropertyType.VILLA, status=PropertyStatus.SOLD
        )
        foreign = await PropertyFactory.create_property(property_repository, test_seller.id)
        await InquiryFactory.create_inquiry(inquiry_repository, own.id)
        await InquiryFactory.create_inquiry(inquiry_repository, foreign.id)

        analytics = await AdminService(db_session).get_analytics(test_admin)

        assert analytics["overview"] == {
            "total_properties": 2,
            "total_buyers": 1,
            "total_inquiries": 1,
            "available_properties": 1,
            "pending_properties": 0,
            "sold_properties": 1,
        }
        assert [i["property_id"] for i in analytics["recent_inquiries"]] == [str(own.id)]
        assert analytics["top_properties"][0]["id"] == str(own.id)
        assert analytics["properties_by_type"] == [{"property_type": "villa", "count": 2}]
        assert sum(month["count"] for month in analytics["monthly_stats"]) == 2

    @pytest.mark.asyncio
    async def test_toggle_user_status(self, db_session, test_buyer, test_admin):
        service = AdminService(db_session)

        assert (await service.toggle_user_status(test_buyer.id)).is_active is False
        assert (await service.toggle_user_status(test_buyer.id)).is_active is True

        with pytest.raises(BadRequestError, match="Cannot modify admin accounts"):
            await service.toggle_user_status(test_admin.id)

        with pytest.raises(NotFoundError, match="User not found"):
            await service.toggle_user_status(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_user(self, db_session, user_repository, test_buyer, test_admin):
        service = AdminService(db_session)

        await service.delete_user(test_buyer.id)
        assert await user_repository.get_by_id(test_buyer.id) is None

        with pytest.raises(BadRequestError, match="Cannot delete admin accounts"):
            await service.delete_user(test_admin.id)

    @pytest.mark.asyncio
    async def test_update_property_status(self, db_session, property_repository, test_admin, test_property):
        service = AdminService(db_session)
        own = await PropertyFactory.create_property(property_repository, test_admin.id)

        updated = await service.update_property_status(own.id, "sold", test_admin)
        assert updated.status == PropertyStatus.SOLD

        with pytest.raises(InsufficientPermissionsError):
            await service.update_property_status(test_property.id, "sold", test_admin)

        with pytest.raises(ValidationError, match="Invalid status"):
            await service.update_property_status(own.id, "rented", test_admin)


class TestSeedService:
    """Test demo listing generation."""

    @pytest.mark.asyncio
    async def test_seed_listings(self, db_session, test_seller):
        listings = await SeedService(db_session).seed_listings(test_seller)

        assert len(listings) == SEED_COUNT
        assert len({p.property_type for p in listings}) == SEED_COUNT
        assert all(p.featured for p in listings)
        assert all(len(p.images) == 4 for p in listings)
        assert all(p.model_url in DEMO_MODELS for p in listings)
        assert all(p.owner_id == test_seller.id for p in listings)

    @pytest.mark.asyncio
    async def test_seed_twice_suffixes_titles(self, db_session, test_seller):
        service = SeedService(db_session)
        await service.seed_listings(test_seller)

        listings = await service.seed_listings(test_seller)

        assert len(listings) == SEED_COUNT * 2
        suffixed = [p.title for p in listings if " #" in p.title]
        assert len(suffixed) == SEED_COUNT
        assert all(len(title.rsplit(" #", 1)[1]) == 4 for title in suffixed)
