"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error")
    message: str = Field(..., description="Human-readable error message")
    type: Optional[str] = Field(None, description="Error type identifier")
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Schema for standardized error responses."""

    code: str = Field(..., description="Error code identifier", examples=["VALIDATION_ERROR"])
    message: str = Field(..., description="Human-readable error message")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
    details: Optional[List[ErrorDetail]] = Field(None, description="Detailed error information")
    trace: Optional[str] = Field(None, description="Stack trace, outside production only")


class APIErrorResponse(BaseModel):
    """Schema for API error response wrapper."""

    error: ErrorResponse = Field(..., description="Error information")


def _error_example(description: str, code: str, message: str) -> Dict[str, Any]:
    return {
        "description": description,
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": code,
                        "message": message,
                        "timestamp": "2024-01-01T00:00:00Z",
                        "request_id": "abc12345"
                    }
                }
            }
        }
    }


COMMON_ERROR_RESPONSES = {
    400: _error_example("Bad Request - Missing or malformed input", "VALIDATION_ERROR",
                        "Missing required fields: title, description, price, location"),
    401: _error_example("Unauthorized - Authentication required", "UNAUTHORIZED", "Not authorized, no token"),
    403: _error_example("Forbidden - Role or ownership mismatch", "FORBIDDEN", "Access denied. Admin only."),
    404: _error_example("Not Found - Resource does not exist", "NOT_FOUND", "Property not found"),
    500: _error_example("Internal Server Error", "INTERNAL_SERVER_ERROR", "Unexpected database failure"),
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get error response schemas for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary of error response schemas
    """
    return {
        code: COMMON_ERROR_RESPONSES[code]
        for code in status_codes
        if code in COMMON_ERROR_RESPONSES
    }


def get_public_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for unauthenticated endpoints."""
    return get_error_responses(400, 404, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Get error response schemas for authenticated CRUD operations."""
    return get_error_responses(400, 401, 403, 404, 500)
