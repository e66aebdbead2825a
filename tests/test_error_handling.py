"""
Tests for error handling and validation.
Tests custom exceptions, validation helpers, the validation middleware and
error response formatting.
"""

import pytest
import json
import uuid
from decimal import Decimal
from unittest.mock import Mock
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from app.models.property import PropertyType
from app.middleware.validation import ValidationMiddleware
from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import (
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    FileUploadError,
    FileSizeExceededError,
    InsufficientPermissionsError
)
from app.utils.file_utils import AssetKind, FileValidator, generate_local_filename
from app.utils.validators import ValidationUtils
from tests.conftest import make_upload


class TestErrorHandlerService:
    """Test error handler service functionality."""

    def test_format_error_response(self):
        response = ErrorHandlerService.format_error_response(
            error_code="TEST_ERROR",
            message="Test error message",
            details=[{"field": "test", "message": "Test field error"}],
            request_id="test123"
        )

        assert response["error"]["code"] == "TEST_ERROR"
        assert response["error"]["message"] == "Test error message"
        assert response["error"]["request_id"] == "test123"
        assert response["error"]["details"][0]["field"] == "test"
        assert response["error"]["timestamp"].endswith("Z")

    def test_handle_api_exception(self):
        response = ErrorHandlerService.handle_api_exception(ValidationError("Test validation error"))

        assert response.status_code == 400
        response_data = json.loads(response.body)
        assert response_data["error"]["code"] == "VALIDATION_ERROR"
        assert response_data["error"]["message"] == "Test validation error"
        assert "request_id" in response_data["error"]

    def test_handle_unauthorized_sets_header(self):
        response = ErrorHandlerService.handle_api_exception(UnauthorizedError())

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert json.loads(response.body)["error"]["message"] == "Not authorized, no token"

    def test_handle_validation_error(self):
        mock_error = Mock()
        mock_error.errors.return_value = [
            {"loc": ("body", "field1"), "msg": "Field required", "type": "missing"},
            {"loc": ("query", "nested"), "msg": "Invalid value", "type": "value_error"}
        ]

        response = ErrorHandlerService.handle_validation_error(mock_error)

        assert response.status_code == 400
        response_data = json.loads(response.body)
        assert response_data["error"]["code"] == "VALIDATION_ERROR"
        assert response_data["error"]["message"] == "field1: Field required"
        assert response_data["error"]["details"][1]["field"] == "query -> nested"

    def test_handle_database_error(self):
        response = ErrorHandlerService.handle_database_error(IntegrityError("statement", "params", "orig"))

        assert response.status_code == 409
        assert json.loads(response.body)["error"]["code"] == "INTEGRITY_ERROR"

    def test_handle_unexpected_error_keeps_message_and_trace(self):
        try:
            raise RuntimeError("disk on fire")
        except RuntimeError as e:
            response = ErrorHandlerService.handle_unexpected_error(e)

        assert response.status_code == 500
        response_data = json.loads(response.body)
        assert response_data["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert response_data["error"]["message"] == "disk on fire"
        assert "RuntimeError" in response_data["error"]["trace"]


class TestExceptions:
    """Test exception messages and codes."""

    def test_not_found_message(self):
        assert NotFoundError("Property").detail == "Property not found"
        assert NotFoundError("Property").status_code == 404

    def test_insufficient_permissions_message(self):
        error = InsufficientPermissionsError("update this property")
        assert error.detail == "Not authorized to update this property"
        assert error.status_code == 403

    def test_file_upload_error_carries_field(self):
        error = FileUploadError("Only .glb or .gltf model files are allowed", field="model")

        assert error.status_code == 400
        assert error.error_code == "UPLOAD_REJECTED"
        assert "(field 'model')" in error.detail
        assert error.field_errors == [{"field": "model", "message": "Only .glb or .gltf model files are allowed"}]


class TestValidationUtils:
    """Test validation utilities."""

    def test_require_fields(self):
        ValidationUtils.require_fields({"a": "x", "b": 0}, ("a", "b"))

        with pytest.raises(ValidationError) as exc_info:
            ValidationUtils.require_fields({"a": "  ", "b": "y"}, ("a", "b", "c"))
        assert exc_info.value.detail == "Missing required fields: a, c"
        assert [e["field"] for e in exc_info.value.field_errors] == ["a", "c"]

    def test_validate_uuid(self):
        value = uuid.uuid4()
        assert ValidationUtils.validate_uuid(str(value)) == value

        with pytest.raises(ValidationError, match="Invalid propertyId"):
            ValidationUtils.validate_uuid("nope", "propertyId")

    def test_validate_integer(self):
        assert ValidationUtils.validate_integer("3", "Bedrooms") == 3
        assert ValidationUtils.validate_integer("4.0", "Bedrooms") == 4
        assert ValidationUtils.validate_integer("", "Bedrooms", default=0) == 0

        with pytest.raises(ValidationError, match="Bedrooms must be a valid integer"):
            ValidationUtils.validate_integer("2.5", "Bedrooms")
        with pytest.raises(ValidationError, match="Area cannot be negative"):
            ValidationUtils.validate_integer("-10", "Area", min_value=0)

    def test_validate_decimal(self):
        assert ValidationUtils.validate_decimal("1250000.50", "Price") == Decimal("1250000.50")
        assert ValidationUtils.validate_decimal(None, "Price") is None

        with pytest.raises(ValidationError, match="Price must be a valid number"):
            ValidationUtils.validate_decimal("NaN", "Price")
        with pytest.raises(ValidationError, match="Price cannot be negative"):
            ValidationUtils.validate_decimal("-1", "Price", min_value=Decimal("0"))

    @pytest.mark.parametrize("value", ["1e999999999", "1" * 10, "Infinity"])
    def test_validate_integer_rejects_oversized(self, value):
        with pytest.raises(ValidationError, match="Area (is too large|must be a valid integer)"):
            ValidationUtils.validate_integer(value, "Area")

    def test_validate_integer_limits(self):
        assert ValidationUtils.validate_integer("999999999", "Area") == 999999999

        with pytest.raises(ValidationError, match="Area is too large"):
            ValidationUtils.validate_integer("1e9", "Area")

    def test_validate_decimal_rejects_oversized(self):
        assert ValidationUtils.validate_decimal("999999999999.99", "Price") == Decimal("999999999999.99")

        with pytest.raises(ValidationError, match="Price is too large"):
            ValidationUtils.validate_decimal("1e999999999", "Price")
        with pytest.raises(ValidationError, match="maxPrice is too large"):
            ValidationUtils.validate_decimal("1000000000000", "maxPrice")

    def test_validate_enum(self):
        assert ValidationUtils.validate_enum(" Condo ", PropertyType, "propertyType") == PropertyType.CONDO
        assert ValidationUtils.validate_enum("", PropertyType, "propertyType") is None

        with pytest.raises(ValidationError, match="Invalid propertyType. Allowed values: house, apartment"):
            ValidationUtils.validate_enum("castle", PropertyType, "propertyType")

    def test_parse_json_list(self):
        assert ValidationUtils.parse_json_list('["a", "b"]', "imagesToDelete") == ["a", "b"]
        assert ValidationUtils.parse_json_list(None, "imagesToDelete") == []

        with pytest.raises(ValidationError, match="imagesToDelete must be a JSON array"):
            ValidationUtils.parse_json_list('{"a": 1}', "imagesToDelete")
        with pytest.raises(ValidationError, match="imagesToDelete must be a JSON array"):
            ValidationUtils.parse_json_list("[broken", "imagesToDelete")


class TestFileValidator:
    """Test per-field upload rules."""

    def test_image_accepted(self):
        upload = make_upload("Front.JPG", b"jpeg", "image/jpeg")
        assert FileValidator.validate_upload_file("images", upload) == (AssetKind.IMAGE, ".jpg")

    @pytest.mark.parametrize("filename,content_type", [
        ("notes.txt", "text/plain"),
        ("photo.jpg", "application/pdf"),
        ("photo.bmp", "image/bmp"),
    ])
    def test_image_rejected(self, filename, content_type):
        with pytest.raises(FileUploadError, match="Only image files are allowed"):
            FileValidator.validate_upload_file("newImages", make_upload(filename, b"x", content_type))

    def test_model_checked_by_extension_only(self):
        upload = make_upload("house.GLB", b"glTF", "application/octet-stream")
        assert FileValidator.validate_upload_file("newModel", upload) == (AssetKind.MODEL, ".glb")

        with pytest.raises(FileUploadError, match="Only .glb or .gltf model files are allowed"):
            FileValidator.validate_upload_file("model", make_upload("house.fbx", b"x", "model/gltf-binary"))

    def test_unknown_field(self):
        with pytest.raises(FileUploadError, match="Unknown field name"):
            FileValidator.validate_upload_file("avatar", make_upload("me.png", b"x", "image/png"))

    def test_file_size_limit(self):
        with pytest.raises(FileSizeExceededError):
            FileValidator.validate_file_size(2048, max_size=1024)

    def test_local_filename_format(self):
        filename = generate_local_filename(AssetKind.IMAGE, ".png")
        prefix, millis, suffix = filename[:-4].split("-")

        assert prefix == "img"
        assert millis.isdigit() and suffix.isdigit()
        assert filename.endswith(".png")
        assert generate_local_filename(AssetKind.MODEL, ".glb").startswith("model-")


class TestValidationMiddleware:
    """Test validation middleware functionality."""

    @pytest.fixture
    def test_app(self):
        test_app = FastAPI()
        test_app.add_middleware(ValidationMiddleware, max_request_size=1024, enable_request_logging=False)

        @test_app.get("/ping")
        async def ping():
            return {"message": "pong"}

        @test_app.post("/echo")
        async def echo(data: dict):
            return data

        @test_app.get("/boom")
        async def boom():
            raise RuntimeError("exploded")

        return test_app

    def test_request_id_header(self, test_app):
        response = TestClient(test_app).get("/ping")

        assert response.status_code == 200
        assert len(response.headers["X-Request-ID"]) == 8

    def test_request_size_validation(self, test_app):
        response = TestClient(test_app).post("/echo", json={"blob": "x" * 4096})

        assert response.status_code == 400
        assert "exceeds maximum allowed size" in response.json()["error"]["message"]

    def test_unexpected_error_rendered(self, test_app):
        response = TestClient(test_app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json()["error"]["message"] == "exploded"
